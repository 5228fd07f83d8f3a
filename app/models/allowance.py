# app/models/allowance.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Float, Date, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class Allowance(Base):
    __tablename__ = "allowances"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_by = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    memo = Column(String(length=255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Allowance amount={self.amount} date={self.date} user_id={self.user_id}>"
