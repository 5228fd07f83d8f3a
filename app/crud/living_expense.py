# app/crud/living_expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
import uuid

from app.models.living_expense import LivingExpense
from app.schemas.living_expense import LivingExpenseCreate, LivingExpenseUpdate

NULLABLE_FIELDS = {"user_id", "memo"}

async def get_living_expenses_for_household(
    user_ids: Sequence[uuid.UUID],
    db: AsyncSession,
    category: Optional[str] = None,
) -> List[LivingExpense]:
    query = select(LivingExpense).where(LivingExpense.created_by.in_(user_ids))
    if category is not None:
        query = query.where(LivingExpense.category == category)
    result = await db.execute(query.order_by(desc(LivingExpense.date)))
    return result.scalars().all()

async def get_living_expense_by_id(expense_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[LivingExpense]:
    result = await db.execute(
        select(LivingExpense).where(LivingExpense.id == expense_id, LivingExpense.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_living_expense(creator_id: uuid.UUID, expense_in: LivingExpenseCreate, db: AsyncSession) -> LivingExpense:
    new_expense = LivingExpense(**expense_in.dict(), created_by=creator_id)
    db.add(new_expense)
    await db.commit()
    await db.refresh(new_expense)
    return new_expense

async def update_living_expense(expense: LivingExpense, expense_in: LivingExpenseUpdate, db: AsyncSession) -> LivingExpense:
    for field, value in expense_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(expense, field, value)
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    return expense

async def delete_living_expense(expense: LivingExpense, db: AsyncSession) -> None:
    await db.delete(expense)
    await db.commit()
