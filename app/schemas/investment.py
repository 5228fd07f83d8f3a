# app/schemas/investment.py
from typing import Optional
import datetime
import uuid
from pydantic import BaseModel, Field

class InvestmentBase(BaseModel):
    user_id: Optional[uuid.UUID] = None
    name: str = Field(..., min_length=1, max_length=150)
    type: str = Field(..., min_length=1, max_length=50, description="E.g. stock, bond, real estate")
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime.date
    current_value: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    memo: Optional[str] = Field(None, max_length=255)

class InvestmentCreate(InvestmentBase):
    pass

class InvestmentUpdate(BaseModel):
    user_id: Optional[uuid.UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    type: Optional[str] = Field(None, min_length=1, max_length=50)
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    date: Optional[datetime.date] = None
    current_value: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    memo: Optional[str] = Field(None, max_length=255)

class InvestmentRead(InvestmentBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True

class InvestmentSnapshotCreate(BaseModel):
    investment_amount: float = Field(..., ge=0, allow_inf_nan=False)
    kis_total_value: float = Field(0.0, ge=0, allow_inf_nan=False)

class InvestmentSnapshotRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    snapshot_date: datetime.date
    investment_amount: float
    kis_total_value: float
    created_at: Optional[datetime.datetime] = None

    class Config:
        from_attributes = True
