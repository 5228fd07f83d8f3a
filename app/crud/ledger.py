# app/crud/ledger.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
import uuid

from app.models.ledger import LedgerTransaction
from app.schemas.ledger import LedgerTransactionCreate, LedgerTransactionUpdate

NULLABLE_FIELDS = {"user_id", "memo"}

async def get_ledger_transactions_for_household(
    user_ids: Sequence[uuid.UUID],
    db: AsyncSession,
    owner_id: Optional[uuid.UUID] = None,
    joint_only: bool = False,
) -> List[LedgerTransaction]:
    """Household entries, optionally narrowed to one owner or to joint entries."""
    query = select(LedgerTransaction).where(LedgerTransaction.created_by.in_(user_ids))
    if joint_only:
        query = query.where(LedgerTransaction.user_id.is_(None))
    elif owner_id is not None:
        query = query.where(LedgerTransaction.user_id == owner_id)
    result = await db.execute(query.order_by(desc(LedgerTransaction.date)))
    return result.scalars().all()

async def get_ledger_transaction_by_id(tx_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[LedgerTransaction]:
    result = await db.execute(
        select(LedgerTransaction).where(LedgerTransaction.id == tx_id, LedgerTransaction.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_ledger_transaction(creator_id: uuid.UUID, tx_in: LedgerTransactionCreate, db: AsyncSession) -> LedgerTransaction:
    new_tx = LedgerTransaction(**tx_in.dict(), created_by=creator_id)
    db.add(new_tx)
    await db.commit()
    await db.refresh(new_tx)
    return new_tx

async def update_ledger_transaction(tx: LedgerTransaction, tx_in: LedgerTransactionUpdate, db: AsyncSession) -> LedgerTransaction:
    for field, value in tx_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(tx, field, value)
    db.add(tx)
    await db.commit()
    await db.refresh(tx)
    return tx

async def delete_ledger_transaction(tx: LedgerTransaction, db: AsyncSession) -> None:
    await db.delete(tx)
    await db.commit()
