# app/schemas/salary.py
from typing import Optional
import datetime
import uuid
from pydantic import BaseModel, Field

class SalaryBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime.date
    memo: Optional[str] = Field(None, max_length=255)

class SalaryCreate(SalaryBase):
    pass

class SalaryUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    date: Optional[datetime.date] = None
    memo: Optional[str] = Field(None, max_length=255)

class SalaryRead(SalaryBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True
