# app/crud/investment.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
from datetime import date
import uuid

from app.models.investment import Investment, InvestmentSnapshot
from app.schemas.investment import InvestmentCreate, InvestmentUpdate

NULLABLE_FIELDS = {"user_id", "memo", "current_value"}

async def get_investments_for_household(user_ids: Sequence[uuid.UUID], db: AsyncSession) -> List[Investment]:
    result = await db.execute(
        select(Investment)
        .where(Investment.created_by.in_(user_ids))
        .order_by(desc(Investment.date))
    )
    return result.scalars().all()

async def get_investment_by_id(investment_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[Investment]:
    result = await db.execute(
        select(Investment).where(Investment.id == investment_id, Investment.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_investment(creator_id: uuid.UUID, investment_in: InvestmentCreate, db: AsyncSession) -> Investment:
    new_investment = Investment(**investment_in.dict(), created_by=creator_id)
    db.add(new_investment)
    await db.commit()
    await db.refresh(new_investment)
    return new_investment

async def update_investment(investment: Investment, investment_in: InvestmentUpdate, db: AsyncSession) -> Investment:
    for field, value in investment_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(investment, field, value)
    db.add(investment)
    await db.commit()
    await db.refresh(investment)
    return investment

async def delete_investment(investment: Investment, db: AsyncSession) -> None:
    await db.delete(investment)
    await db.commit()


# ── snapshots ───────────────────────────────────────────────────────────────
async def upsert_snapshot(
    user_id: uuid.UUID,
    snapshot_date: date,
    investment_amount: float,
    kis_total_value: float,
    db: AsyncSession,
) -> InvestmentSnapshot:
    """One snapshot per user and day: rewrite today's row if it exists."""
    result = await db.execute(
        select(InvestmentSnapshot).where(
            InvestmentSnapshot.user_id == user_id,
            InvestmentSnapshot.snapshot_date == snapshot_date,
        )
    )
    snapshot = result.scalar_one_or_none()
    if snapshot is None:
        snapshot = InvestmentSnapshot(user_id=user_id, snapshot_date=snapshot_date)
        db.add(snapshot)
    snapshot.investment_amount = investment_amount
    snapshot.kis_total_value = kis_total_value or 0.0
    await db.commit()
    await db.refresh(snapshot)
    return snapshot

async def get_snapshots_for_household(user_ids: Sequence[uuid.UUID], db: AsyncSession) -> List[InvestmentSnapshot]:
    result = await db.execute(
        select(InvestmentSnapshot)
        .where(InvestmentSnapshot.user_id.in_(user_ids))
        .order_by(desc(InvestmentSnapshot.snapshot_date))
    )
    return result.scalars().all()
