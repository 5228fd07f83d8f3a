# app/crud/invitation.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc
from typing import List, Optional
from datetime import datetime
import uuid

from app.models.invitation import Invitation, InvitationStatus

async def create_invitation(
    inviter_id: uuid.UUID,
    invitee_email: str,
    code: str,
    expires_at: datetime,
    db: AsyncSession,
    commit: bool = True,
) -> Invitation:
    invitation = Invitation(
        inviter_id=inviter_id,
        invitee_email=invitee_email,
        code=code,
        expires_at=expires_at,
        status=InvitationStatus.PENDING,
    )
    db.add(invitation)
    if commit:
        await db.commit()
        await db.refresh(invitation)
    else:
        await db.flush()
    return invitation

async def code_exists(code: str, db: AsyncSession) -> bool:
    result = await db.execute(select(Invitation.id).where(Invitation.code == code))
    return result.first() is not None

async def get_pending_invitation_by_code(code: str, db: AsyncSession, now: Optional[datetime] = None) -> Optional[Invitation]:
    """Only PENDING, unexpired rows match; anything else reads as not found."""
    now = now or datetime.utcnow()
    result = await db.execute(
        select(Invitation).where(
            Invitation.code == code,
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at > now,
        )
    )
    return result.scalar_one_or_none()

async def get_sent_invitations(inviter_id: uuid.UUID, db: AsyncSession) -> List[Invitation]:
    result = await db.execute(
        select(Invitation)
        .where(Invitation.inviter_id == inviter_id)
        .order_by(desc(Invitation.created_at))
    )
    return result.scalars().all()

async def get_received_invitations(email: str, db: AsyncSession, now: Optional[datetime] = None) -> List[Invitation]:
    now = now or datetime.utcnow()
    result = await db.execute(
        select(Invitation)
        .where(
            Invitation.invitee_email == email,
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at > now,
        )
        .order_by(desc(Invitation.created_at))
    )
    return result.scalars().all()

async def set_invitation_status(
    invitation: Invitation,
    status: InvitationStatus,
    db: AsyncSession,
    commit: bool = True,
) -> Invitation:
    invitation.status = status
    db.add(invitation)
    if commit:
        await db.commit()
        await db.refresh(invitation)
    else:
        await db.flush()
    return invitation
