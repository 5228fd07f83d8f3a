# app/api/v1/routes/savings.py
from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.savings import SavingsCreate, SavingsRead, SavingsUpdate
from app.crud.savings import get_savings_for_household, get_savings_by_id
from app.core.database import get_async_session
from app.models.savings import SavingsType
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/savings", tags=["Savings"])

@router.get("", response_model=List[SavingsRead])
async def read_savings(
    request: Request,
    type: Optional[SavingsType] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_savings_for_household(member.household_ids, db, savings_type=type)

@router.post("", response_model=SavingsRead, status_code=status.HTTP_201_CREATED)
async def create_savings(
    savings_in: SavingsCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Savings"):
        return await store.add("savings", savings_in)

@router.get("/{savings_id}", response_model=SavingsRead)
async def read_savings_entry(
    savings_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    savings = await get_savings_by_id(savings_id, member.household_ids, db)
    if not savings:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Savings not found")
    return savings

@router.patch("/{savings_id}", response_model=SavingsRead)
async def update_savings(
    savings_id: uuid.UUID,
    savings_in: SavingsUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Savings"):
        return await store.update("savings", savings_id, savings_in)

@router.delete("/{savings_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_savings(
    savings_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Savings"):
        await store.remove("savings", savings_id)
    return None
