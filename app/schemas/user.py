# app/schemas/user.py
from typing import Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, Field

from app.models.user import PartnerType

class UserRead(BaseModel):
    id: uuid.UUID
    auth_user_id: Optional[uuid.UUID] = None
    name: str
    type: Optional[PartnerType] = None
    character: Optional[str] = None
    partner_id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Fields accepted on PATCH /users/me
class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    character: Optional[str] = Field(None, max_length=50)

class HouseholdRead(BaseModel):
    """The signed-in member and, once linked, their partner."""
    user: UserRead
    partner: Optional[UserRead] = None
