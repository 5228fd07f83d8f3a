# app/crud/goal.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional, Sequence
import uuid

from app.models.goal import Goal
from app.schemas.goal import GoalCreate, GoalUpdate

NULLABLE_FIELDS = {"user_id", "memo", "deadline"}

async def get_goals_for_household(user_ids: Sequence[uuid.UUID], db: AsyncSession) -> List[Goal]:
    result = await db.execute(
        select(Goal)
        .where(Goal.created_by.in_(user_ids))
        .order_by(desc(Goal.created_at))
    )
    return result.scalars().all()

async def get_goal_by_id(goal_id: uuid.UUID, user_ids: Sequence[uuid.UUID], db: AsyncSession) -> Optional[Goal]:
    result = await db.execute(
        select(Goal).where(Goal.id == goal_id, Goal.created_by.in_(user_ids))
    )
    return result.scalar_one_or_none()

async def create_goal(creator_id: uuid.UUID, goal_in: GoalCreate, db: AsyncSession) -> Goal:
    new_goal = Goal(**goal_in.dict(), created_by=creator_id)
    db.add(new_goal)
    await db.commit()
    await db.refresh(new_goal)
    return new_goal

async def update_goal(goal: Goal, goal_in: GoalUpdate, db: AsyncSession) -> Goal:
    for field, value in goal_in.dict(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(goal, field, value)
    db.add(goal)
    await db.commit()
    await db.refresh(goal)
    return goal

async def delete_goal(goal: Goal, db: AsyncSession) -> None:
    await db.delete(goal)
    await db.commit()
