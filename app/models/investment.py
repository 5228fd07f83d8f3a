# app/models/investment.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class Investment(Base):
    __tablename__ = "investments"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(length=150), nullable=False)
    type = Column(String(length=50), nullable=False)  # stock, bond, real estate...
    amount = Column(Float, nullable=False)  # principal paid in
    date = Column(Date, nullable=False)
    current_value = Column(Float, nullable=True)
    memo = Column(String(length=255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Investment name={self.name} amount={self.amount} current_value={self.current_value}>"

class InvestmentSnapshot(Base):
    """Point-in-time investment valuation, one row per user and day."""
    __tablename__ = "investment_snapshots"
    __table_args__ = (UniqueConstraint("user_id", "snapshot_date", name="uq_investment_snapshot_user_date"),)

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    snapshot_date = Column(Date, nullable=False)
    investment_amount = Column(Float, nullable=False, default=0.0)
    kis_total_value = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def value(self) -> float:
        # Broker valuation wins over the locally entered amount
        return self.kis_total_value if (self.kis_total_value or 0) > 0 else (self.investment_amount or 0.0)

    def __repr__(self):
        return f"<InvestmentSnapshot date={self.snapshot_date} value={self.value}>"
