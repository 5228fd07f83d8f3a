# app/crud/allowance.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
import uuid

from app.models.allowance import Allowance
from app.schemas.allowance import AllowanceCreate, AllowanceUpdate

NULLABLE_FIELDS = {"user_id", "memo"}

async def get_allowances_for_household(user_ids: Sequence[uuid.UUID], db: AsyncSession) -> List[Allowance]:
    result = await db.execute(
        select(Allowance)
        .where(Allowance.created_by.in_(user_ids))
        .order_by(desc(Allowance.date))
    )
    return result.scalars().all()

async def get_allowance_by_id(allowance_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[Allowance]:
    result = await db.execute(
        select(Allowance).where(Allowance.id == allowance_id, Allowance.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_allowance(creator_id: uuid.UUID, allowance_in: AllowanceCreate, db: AsyncSession) -> Allowance:
    new_allowance = Allowance(**allowance_in.dict(), created_by=creator_id)
    db.add(new_allowance)
    await db.commit()
    await db.refresh(new_allowance)
    return new_allowance

async def update_allowance(allowance: Allowance, allowance_in: AllowanceUpdate, db: AsyncSession) -> Allowance:
    for field, value in allowance_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(allowance, field, value)
    db.add(allowance)
    await db.commit()
    await db.refresh(allowance)
    return allowance

async def delete_allowance(allowance: Allowance, db: AsyncSession) -> None:
    await db.delete(allowance)
    await db.commit()
