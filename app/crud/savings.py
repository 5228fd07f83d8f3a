# app/crud/savings.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
import uuid

from app.models.savings import Savings, SavingsType
from app.schemas.savings import SavingsCreate, SavingsUpdate

NULLABLE_FIELDS = {"user_id", "memo"}

async def get_savings_for_household(
    user_ids: Sequence[uuid.UUID],
    db: AsyncSession,
    savings_type: Optional[SavingsType] = None,
) -> List[Savings]:
    query = select(Savings).where(Savings.created_by.in_(user_ids))
    if savings_type is not None:
        query = query.where(Savings.type == savings_type)
    result = await db.execute(query.order_by(desc(Savings.date)))
    return result.scalars().all()

async def get_savings_by_id(savings_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[Savings]:
    result = await db.execute(
        select(Savings).where(Savings.id == savings_id, Savings.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_savings(creator_id: uuid.UUID, savings_in: SavingsCreate, db: AsyncSession) -> Savings:
    new_savings = Savings(**savings_in.dict(), created_by=creator_id)
    db.add(new_savings)
    await db.commit()
    await db.refresh(new_savings)
    return new_savings

async def update_savings(savings: Savings, savings_in: SavingsUpdate, db: AsyncSession) -> Savings:
    for field, value in savings_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(savings, field, value)
    db.add(savings)
    await db.commit()
    await db.refresh(savings)
    return savings

async def delete_savings(savings: Savings, db: AsyncSession) -> None:
    await db.delete(savings)
    await db.commit()
