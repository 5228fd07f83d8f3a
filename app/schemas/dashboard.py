# app/schemas/dashboard.py
from typing import List, Optional
from pydantic import BaseModel

class MonthlySummaryRead(BaseModel):
    month: str  # YYYY-MM
    total_income: float
    total_expense: float
    cash_balance: float
    total_savings: float
    total_investment: float
    total_assets: float

    class Config:
        from_attributes = True

class AssetChange(BaseModel):
    previous_assets: float
    amount: float
    percentage: float

class DashboardSummary(BaseModel):
    current: MonthlySummaryRead
    previous: Optional[MonthlySummaryRead] = None
    change: AssetChange
    holdings_total: float
    holdings_connected: bool
    history: List[MonthlySummaryRead]
