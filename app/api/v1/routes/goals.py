# app/api/v1/routes/goals.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from app.schemas.goal import GoalCreate, GoalProgressResponse, GoalRead, GoalUpdate
from app.crud.goal import get_goals_for_household, get_goal_by_id
from app.core.database import get_async_session
from app.models.user import User
from app.api.deps import get_current_member, get_household_store
from app.api.errors import store_errors
from app.utils.aggregation import goal_progress
from app.utils.store import HouseholdStore

router = APIRouter(prefix="/goals", tags=["Goals"])

@router.get("", response_model=List[GoalRead])
async def read_goals(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_goals_for_household(member.household_ids, db)

@router.post("", response_model=GoalRead, status_code=status.HTTP_201_CREATED)
async def create_goal(
    goal_in: GoalCreate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Goal"):
        return await store.add("goals", goal_in)

@router.get("/{goal_id}", response_model=GoalRead)
async def read_goal(
    goal_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    goal = await get_goal_by_id(goal_id, member.household_ids, db)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal

@router.get("/{goal_id}/progress", response_model=GoalProgressResponse)
async def read_goal_progress(
    goal_id: uuid.UUID,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    """
    Progress towards a shared goal.

    Returns:
    - **remaining_amount**: Amount still missing to reach the target
    - **progress_percentage**: current / target in percent (0 for a zero target)
    - **days_left**: Days until the deadline, negative once it passed
    - **status**: "Completed", "Overdue" or "In Progress"
    """
    goal = await get_goal_by_id(goal_id, member.household_ids, db)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Goal not found")
    return goal_progress(goal)

@router.patch("/{goal_id}", response_model=GoalRead)
async def update_goal(
    goal_id: uuid.UUID,
    goal_in: GoalUpdate,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Goal"):
        return await store.update("goals", goal_id, goal_in)

@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: uuid.UUID,
    request: Request,
    store: HouseholdStore = Depends(get_household_store),
):
    with store_errors("Goal"):
        await store.remove("goals", goal_id)
    return None
