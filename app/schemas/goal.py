# app/schemas/goal.py
from typing import Optional
from datetime import date
import uuid
from pydantic import BaseModel, Field

class GoalBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    title: str = Field(..., min_length=1, max_length=150)
    target_amount: float = Field(..., ge=0, allow_inf_nan=False)
    current_amount: float = Field(0.0, ge=0, allow_inf_nan=False)
    deadline: Optional[date] = None
    memo: Optional[str] = Field(None, max_length=255)

class GoalCreate(GoalBase):
    pass

class GoalUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    title: Optional[str] = Field(None, min_length=1, max_length=150)
    target_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    current_amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    deadline: Optional[date] = None
    memo: Optional[str] = Field(None, max_length=255)

class GoalRead(GoalBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True

class GoalProgressResponse(BaseModel):
    target_amount: float
    current_amount: float
    remaining_amount: float
    progress_percentage: float
    days_left: Optional[int] = None
    status: str
