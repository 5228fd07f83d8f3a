# app/schemas/allowance.py
from typing import Optional
import datetime
import uuid
from pydantic import BaseModel, Field

class AllowanceBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime.date
    memo: Optional[str] = Field(None, max_length=255)

class AllowanceCreate(AllowanceBase):
    pass

class AllowanceUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    date: Optional[datetime.date] = None
    memo: Optional[str] = Field(None, max_length=255)

class AllowanceRead(AllowanceBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True
