# app/schemas/fixed_expense.py
from typing import Optional
import uuid
from pydantic import BaseModel, Field

class FixedExpenseBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    name: str = Field(..., min_length=1, max_length=150, description="E.g. Rent, Phone bill")
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    day_of_month: int = Field(..., ge=1, le=31)
    memo: Optional[str] = Field(None, max_length=255)

class FixedExpenseCreate(FixedExpenseBase):
    pass

class FixedExpenseUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    memo: Optional[str] = Field(None, max_length=255)

class FixedExpenseRead(FixedExpenseBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True
