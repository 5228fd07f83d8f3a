# app/crud/fixed_expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional, Sequence
import uuid

from app.models.fixed_expense import FixedExpense
from app.schemas.fixed_expense import FixedExpenseCreate, FixedExpenseUpdate

NULLABLE_FIELDS = {"user_id", "memo"}

async def get_fixed_expenses_for_household(user_ids: Sequence[uuid.UUID], db: AsyncSession) -> List[FixedExpense]:
    result = await db.execute(
        select(FixedExpense)
        .where(FixedExpense.created_by.in_(user_ids))
        .order_by(FixedExpense.day_of_month)
    )
    return result.scalars().all()

async def get_fixed_expense_by_id(expense_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[FixedExpense]:
    result = await db.execute(
        select(FixedExpense).where(FixedExpense.id == expense_id, FixedExpense.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_fixed_expense(creator_id: uuid.UUID, expense_in: FixedExpenseCreate, db: AsyncSession) -> FixedExpense:
    new_expense = FixedExpense(**expense_in.dict(), created_by=creator_id)
    db.add(new_expense)
    await db.commit()
    await db.refresh(new_expense)
    return new_expense

async def update_fixed_expense(expense: FixedExpense, expense_in: FixedExpenseUpdate, db: AsyncSession) -> FixedExpense:
    for field, value in expense_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(expense, field, value)
    db.add(expense)
    await db.commit()
    await db.refresh(expense)
    return expense

async def delete_fixed_expense(expense: FixedExpense, db: AsyncSession) -> None:
    await db.delete(expense)
    await db.commit()
