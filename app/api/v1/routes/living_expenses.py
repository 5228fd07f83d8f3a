# app/api/v1/routes/living_expenses.py
from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.living_expense import LivingExpenseCreate, LivingExpenseRead, LivingExpenseUpdate
from app.crud.living_expense import get_living_expenses_for_household, get_living_expense_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/living-expenses", tags=["Living Expenses"])

@router.get("", response_model=List[LivingExpenseRead])
async def read_living_expenses(
    request: Request,
    category: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_living_expenses_for_household(member.household_ids, db, category=category)

@router.post("", response_model=LivingExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_living_expense(
    expense_in: LivingExpenseCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Living expense"):
        return await store.add("living_expenses", expense_in)

@router.get("/{expense_id}", response_model=LivingExpenseRead)
async def read_living_expense(
    expense_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    expense = await get_living_expense_by_id(expense_id, member.household_ids, db)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Living expense not found")
    return expense

@router.patch("/{expense_id}", response_model=LivingExpenseRead)
async def update_living_expense(
    expense_id: uuid.UUID,
    expense_in: LivingExpenseUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Living expense"):
        return await store.update("living_expenses", expense_id, expense_in)

@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_living_expense(
    expense_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Living expense"):
        await store.remove("living_expenses", expense_id)
    return None
