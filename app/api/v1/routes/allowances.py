# app/api/v1/routes/allowances.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from app.schemas.allowance import AllowanceCreate, AllowanceRead, AllowanceUpdate
from app.crud.allowance import get_allowances_for_household, get_allowance_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/allowances", tags=["Allowances"])

@router.get("", response_model=List[AllowanceRead])
async def read_allowances(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_allowances_for_household(member.household_ids, db)

@router.post("", response_model=AllowanceRead, status_code=status.HTTP_201_CREATED)
async def create_allowance(
    allowance_in: AllowanceCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Allowance"):
        return await store.add("allowances", allowance_in)

@router.get("/{allowance_id}", response_model=AllowanceRead)
async def read_allowance(
    allowance_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    allowance = await get_allowance_by_id(allowance_id, member.household_ids, db)
    if not allowance:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Allowance not found")
    return allowance

@router.patch("/{allowance_id}", response_model=AllowanceRead)
async def update_allowance(
    allowance_id: uuid.UUID,
    allowance_in: AllowanceUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Allowance"):
        return await store.update("allowances", allowance_id, allowance_in)

@router.delete("/{allowance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_allowance(
    allowance_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Allowance"):
        await store.remove("allowances", allowance_id)
    return None
