# app/api/v1/routes/salaries.py
from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from app.schemas.salary import SalaryCreate, SalaryRead, SalaryUpdate
from app.crud.salary import get_salaries_for_household, get_salary_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/salaries", tags=["Salaries"])

@router.get("", response_model=List[SalaryRead])
async def read_salaries(
    request: Request,
    owner_id: Optional[uuid.UUID] = Query(None, description="Only salaries attributed to this member"),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_salaries_for_household(member.household_ids, db, owner_id=owner_id)

@router.post("", response_model=SalaryRead, status_code=status.HTTP_201_CREATED)
async def create_salary(
    salary_in: SalaryCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Salary"):
        return await store.add("salaries", salary_in)

@router.get("/{salary_id}", response_model=SalaryRead)
async def read_salary(
    salary_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    salary = await get_salary_by_id(salary_id, member.household_ids, db)
    if not salary:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Salary not found")
    return salary

@router.patch("/{salary_id}", response_model=SalaryRead)
async def update_salary(
    salary_id: uuid.UUID,
    salary_in: SalaryUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Salary"):
        return await store.update("salaries", salary_id, salary_in)

@router.delete("/{salary_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_salary(
    salary_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Salary"):
        await store.remove("salaries", salary_id)
    return None
