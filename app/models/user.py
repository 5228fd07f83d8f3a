# app/models/user.py
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class PartnerType(str, enum.Enum):
    PARTNER_1 = "PARTNER_1"
    PARTNER_2 = "PARTNER_2"

    @property
    def other(self) -> "PartnerType":
        return PartnerType.PARTNER_2 if self is PartnerType.PARTNER_1 else PartnerType.PARTNER_1

class User(Base):
    """Household member profile. Two members are partners when their
    partner_id columns point at each other."""
    __tablename__ = "users"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    auth_user_id = Column(PG_UUID(as_uuid=True), ForeignKey("auth_accounts.id", ondelete="CASCADE"), unique=True, nullable=True)
    name = Column(String(length=100), nullable=False)
    type = Column(Enum(PartnerType), nullable=True)
    character = Column(String(length=50), nullable=True)
    partner_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def household_ids(self) -> list:
        """Ids whose records this member may see: itself and its partner."""
        return [self.id] if self.partner_id is None else [self.id, self.partner_id]

    def __repr__(self):
        return f"<User name={self.name} type={self.type} partner_id={self.partner_id}>"
