# app/api/v1/routes/fixed_expenses.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from app.schemas.fixed_expense import FixedExpenseCreate, FixedExpenseRead, FixedExpenseUpdate
from app.crud.fixed_expense import get_fixed_expenses_for_household, get_fixed_expense_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/fixed-expenses", tags=["Fixed Expenses"])

@router.get("", response_model=List[FixedExpenseRead])
async def read_fixed_expenses(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    """Monthly recurring expenses, ordered by the day they are due."""
    return await get_fixed_expenses_for_household(member.household_ids, db)

@router.post("", response_model=FixedExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_fixed_expense(
    expense_in: FixedExpenseCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Fixed expense"):
        return await store.add("fixed_expenses", expense_in)

@router.get("/{expense_id}", response_model=FixedExpenseRead)
async def read_fixed_expense(
    expense_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    expense = await get_fixed_expense_by_id(expense_id, member.household_ids, db)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fixed expense not found")
    return expense

@router.patch("/{expense_id}", response_model=FixedExpenseRead)
async def update_fixed_expense(
    expense_id: uuid.UUID,
    expense_in: FixedExpenseUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Fixed expense"):
        return await store.update("fixed_expenses", expense_id, expense_in)

@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fixed_expense(
    expense_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Fixed expense"):
        await store.remove("fixed_expenses", expense_id)
    return None
