# app/schemas/kis.py
from typing import List, Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, Field

class KisConnectionSave(BaseModel):
    app_key: str = Field(..., min_length=1)
    app_secret: str = Field(..., min_length=1)
    account_number: str = Field(..., min_length=8, max_length=20, description="12345678-01 or 1234567801")
    is_virtual: bool = False

class KisConnectionRead(BaseModel):
    """Connection details without the secret or token."""
    id: uuid.UUID
    user_id: uuid.UUID
    app_key: str
    account_number: str
    is_virtual: bool
    token_expires_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class KisTokenRead(BaseModel):
    token_type: str
    expires_in: int
    access_token_token_expired: Optional[str] = None

class KisAccountRead(BaseModel):
    account_number: str
    account_name: str
    balance: float
    available_balance: float

class KisHoldingRead(BaseModel):
    stock_code: str
    stock_name: str
    quantity: int
    average_price: float
    current_price: float
    total_value: float
    profit_loss: float
    profit_loss_percent: float

    class Config:
        from_attributes = True

class KisHoldingsResponse(BaseModel):
    holdings: List[KisHoldingRead]
    total_value: float
    fetched_at: datetime

class KisPriceRead(BaseModel):
    stock_code: str
    stock_name: str
    current_price: float
    change: float
    change_percent: float
    volume: int
    high_price: float
    low_price: float

    class Config:
        from_attributes = True
