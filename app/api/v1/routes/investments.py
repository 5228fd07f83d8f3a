# app/api/v1/routes/investments.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from app.schemas.investment import InvestmentCreate, InvestmentRead, InvestmentUpdate
from app.crud.investment import get_investments_for_household, get_investment_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/investments", tags=["Investments"])

@router.get("", response_model=List[InvestmentRead])
async def read_investments(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_investments_for_household(member.household_ids, db)

@router.post("", response_model=InvestmentRead, status_code=status.HTTP_201_CREATED)
async def create_investment(
    investment_in: InvestmentCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Investment"):
        return await store.add("investments", investment_in)

@router.get("/{investment_id}", response_model=InvestmentRead)
async def read_investment(
    investment_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    investment = await get_investment_by_id(investment_id, member.household_ids, db)
    if not investment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Investment not found")
    return investment

@router.patch("/{investment_id}", response_model=InvestmentRead)
async def update_investment(
    investment_id: uuid.UUID,
    investment_in: InvestmentUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Investment"):
        return await store.update("investments", investment_id, investment_in)

@router.delete("/{investment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_investment(
    investment_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Investment"):
        await store.remove("investments", investment_id)
    return None
