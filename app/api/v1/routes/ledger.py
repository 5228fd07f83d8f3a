# app/api/v1/routes/ledger.py
from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.ledger import LedgerTransactionCreate, LedgerTransactionRead, LedgerTransactionUpdate
from app.crud.ledger import get_ledger_transactions_for_household, get_ledger_transaction_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/ledger", tags=["Ledger"])

@router.get("", response_model=List[LedgerTransactionRead])
async def read_ledger_transactions(
    request: Request,
    owner_id: Optional[uuid.UUID] = Query(None, description="Only entries attributed to this member"),
    joint_only: bool = Query(False, description="Only entries without an owner"),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_ledger_transactions_for_household(
        member.household_ids, db, owner_id=owner_id, joint_only=joint_only
    )

@router.post("", response_model=LedgerTransactionRead, status_code=status.HTTP_201_CREATED)
async def create_ledger_transaction(
    tx_in: LedgerTransactionCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Ledger entry"):
        return await store.add("ledger_transactions", tx_in)

@router.get("/{tx_id}", response_model=LedgerTransactionRead)
async def read_ledger_transaction(
    tx_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    tx = await get_ledger_transaction_by_id(tx_id, member.household_ids, db)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ledger entry not found")
    return tx

@router.patch("/{tx_id}", response_model=LedgerTransactionRead)
async def update_ledger_transaction(
    tx_id: uuid.UUID,
    tx_in: LedgerTransactionUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Ledger entry"):
        return await store.update("ledger_transactions", tx_id, tx_in)

@router.delete("/{tx_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_ledger_transaction(
    tx_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Ledger entry"):
        await store.remove("ledger_transactions", tx_id)
    return None
