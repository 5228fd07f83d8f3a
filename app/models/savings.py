# app/models/savings.py
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class SavingsType(str, enum.Enum):
    SAVINGS = "SAVINGS"
    EMERGENCY_FUND = "EMERGENCY_FUND"
    CONDOLENCE = "CONDOLENCE"
    TRAVEL_SAVINGS = "TRAVEL_SAVINGS"
    HOUSE_SAVINGS = "HOUSE_SAVINGS"

class Savings(Base):
    __tablename__ = "savings"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    type = Column(Enum(SavingsType), nullable=False, default=SavingsType.SAVINGS)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    memo = Column(String(length=255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Savings type={self.type} amount={self.amount} date={self.date}>"
