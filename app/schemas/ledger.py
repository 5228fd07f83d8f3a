# app/schemas/ledger.py
from typing import Optional
import datetime
import uuid
from pydantic import BaseModel, Field

from app.models.ledger import TransactionType

class LedgerTransactionBase(BaseModel):
    type: TransactionType
    amount: float = Field(..., ge=0, allow_inf_nan=False)
    date: datetime.date
    category: str = Field(..., min_length=1, max_length=50, description="E.g. SIDE_INCOME, LIVING_EXPENSE")
    memo: Optional[str] = Field(None, max_length=255)
    user_id: Optional[uuid.UUID] = Field(None, description="Owner for personal entries, empty for joint ones")

class LedgerTransactionCreate(LedgerTransactionBase):
    pass

class LedgerTransactionUpdate(BaseModel):
    type: Optional[TransactionType] = None
    amount: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    date: Optional[datetime.date] = None
    category: Optional[str] = Field(None, min_length=1, max_length=50)
    memo: Optional[str] = Field(None, max_length=255)
    user_id: Optional[uuid.UUID] = None

class LedgerTransactionRead(LedgerTransactionBase):
    id: uuid.UUID
    created_by: uuid.UUID

    class Config:
        from_attributes = True
