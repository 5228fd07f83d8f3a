# app/models/invitation.py
import uuid
import enum
from datetime import datetime
from typing import Optional
from sqlalchemy import Column, String, ForeignKey, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class InvitationStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"

class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    inviter_id = Column(PG_UUID(as_uuid=True), ForeignKey("auth_accounts.id", ondelete="CASCADE"), nullable=False)
    invitee_email = Column(String, nullable=False, index=True)
    code = Column(String(length=16), nullable=False, unique=True, index=True)
    status = Column(Enum(InvitationStatus), nullable=False, default=InvitationStatus.PENDING)
    expires_at = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def effective_status(self, now: Optional[datetime] = None) -> InvitationStatus:
        # Expiry is evaluated on read; nothing sweeps stale rows.
        now = now or datetime.utcnow()
        if self.status == InvitationStatus.PENDING and self.expires_at <= now:
            return InvitationStatus.EXPIRED
        return self.status

    def __repr__(self):
        return f"<Invitation code={self.code} invitee={self.invitee_email} status={self.status}>"
