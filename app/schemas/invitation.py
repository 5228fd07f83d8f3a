# app/schemas/invitation.py
from typing import Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, EmailStr, Field

from app.models.invitation import InvitationStatus

class InvitationCreate(BaseModel):
    invitee_email: EmailStr
    # Name recorded on the inviter's own profile
    inviter_name: Optional[str] = Field(None, max_length=100)

class InvitationAccept(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    character: Optional[str] = Field(None, max_length=50)

class InvitationRead(BaseModel):
    id: uuid.UUID
    inviter_id: uuid.UUID
    invitee_email: str
    code: str
    status: InvitationStatus
    expires_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
