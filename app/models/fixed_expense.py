# app/models/fixed_expense.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Integer, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class FixedExpense(Base):
    __tablename__ = "fixed_expenses"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(length=150), nullable=False)
    amount = Column(Float, nullable=False)
    # Charged every month on this day; there is no calendar date
    day_of_month = Column(Integer, nullable=False)
    memo = Column(String(length=255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<FixedExpense name={self.name} amount={self.amount} day={self.day_of_month}>"
