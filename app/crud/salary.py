# app/crud/salary.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
import uuid

from app.models.salary import Salary
from app.schemas.salary import SalaryCreate, SalaryUpdate

NULLABLE_FIELDS = {"user_id", "memo"}

async def get_salaries_for_household(
    user_ids: Sequence[uuid.UUID],
    db: AsyncSession,
    owner_id: Optional[uuid.UUID] = None,
) -> List[Salary]:
    query = select(Salary).where(Salary.created_by.in_(user_ids))
    if owner_id is not None:
        query = query.where(Salary.user_id == owner_id)
    result = await db.execute(query.order_by(desc(Salary.date)))
    return result.scalars().all()

async def get_salary_by_id(salary_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[Salary]:
    result = await db.execute(
        select(Salary).where(Salary.id == salary_id, Salary.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_salary(creator_id: uuid.UUID, salary_in: SalaryCreate, db: AsyncSession) -> Salary:
    new_salary = Salary(**salary_in.dict(), created_by=creator_id)
    db.add(new_salary)
    await db.commit()
    await db.refresh(new_salary)
    return new_salary

async def update_salary(salary: Salary, salary_in: SalaryUpdate, db: AsyncSession) -> Salary:
    for field, value in salary_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(salary, field, value)
    db.add(salary)
    await db.commit()
    await db.refresh(salary)
    return salary

async def delete_salary(salary: Salary, db: AsyncSession) -> None:
    await db.delete(salary)
    await db.commit()
