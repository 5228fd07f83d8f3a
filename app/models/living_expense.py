# app/models/living_expense.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class LivingExpense(Base):
    __tablename__ = "living_expenses"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    category = Column(String(length=50), nullable=False)
    memo = Column(String(length=255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<LivingExpense category={self.category} amount={self.amount} date={self.date}>"
