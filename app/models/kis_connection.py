# app/models/kis_connection.py
import uuid
from datetime import datetime
from sqlalchemy import Column, String, ForeignKey, Boolean, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from app.core.database import Base

class KisConnection(Base):
    """Broker credentials for one household member plus the last issued token."""
    __tablename__ = "kis_connections"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    app_key = Column(String, nullable=False)
    app_secret = Column(String, nullable=False)
    account_number = Column(String(length=20), nullable=False)
    is_virtual = Column(Boolean, nullable=False, default=False)
    access_token = Column(String, nullable=True)
    token_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<KisConnection user_id={self.user_id} account={self.account_number} virtual={self.is_virtual}>"
