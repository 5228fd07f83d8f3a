# app/schemas/living_expense.py
from typing import Optional
import datetime
import uuid
from pydantic import BaseModel, Field

class LivingExpenseBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime.date
    category: str = Field(..., min_length=1, max_length=50)
    memo: Optional[str] = Field(None, max_length=255)

class LivingExpenseCreate(LivingExpenseBase):
    pass

class LivingExpenseUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    date: Optional[datetime.date] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    memo: Optional[str] = Field(None, max_length=255)

class LivingExpenseRead(LivingExpenseBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True
