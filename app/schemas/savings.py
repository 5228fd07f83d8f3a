# app/schemas/savings.py
from typing import Optional
import datetime
import uuid
from pydantic import BaseModel, Field

from app.models.savings import SavingsType

class SavingsBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    type: SavingsType = SavingsType.SAVINGS
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime.date
    memo: Optional[str] = Field(None, max_length=255)

class SavingsCreate(SavingsBase):
    pass

class SavingsUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    type: Optional[SavingsType] = None
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    date: Optional[datetime.date] = None
    memo: Optional[str] = Field(None, max_length=255)

class SavingsRead(SavingsBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True
