# app/utils/invitations.py
"""
Partner linking: one member invites the other by email, the invitee accepts
with the code they received and both profiles end up pointing at each other.
"""
import logging
import secrets
import string
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Account, render_email, send_email_via_sendgrid
from app.core.config import settings
from app.core.db_utils import with_db_retry
from app.crud import invitation as invitation_crud
from app.crud.user import get_partner, get_user_by_auth_id, get_user_by_id, upsert_user_for_account
from app.models.invitation import Invitation, InvitationStatus
from app.models.user import PartnerType, User
from app.schemas.invitation import InvitationRead

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 5


class InvitationError(ValueError):
    """Base class for invitation workflow failures."""


class InvitationNotFoundError(InvitationError):
    pass


class InvitationEmailMismatchError(InvitationError):
    pass


class PartnerAlreadyLinkedError(InvitationError):
    pass


class SelfInvitationError(InvitationError):
    pass


def generate_invitation_code(length: Optional[int] = None) -> str:
    length = length or settings.INVITATION_CODE_LENGTH
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def default_member_name(account: Account) -> str:
    return account.email.split("@")[0]


async def _unique_code(db: AsyncSession) -> str:
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_invitation_code()
        if not await invitation_crud.code_exists(code, db):
            return code
    raise RuntimeError("Could not generate a unique invitation code")


async def send_invitation_email(invitation: Invitation, inviter_name: str) -> bool:
    link = f"{settings.FRONTEND_URL}/invite?code={invitation.code}"
    body = render_email(
        title="You're invited",
        message=(
            f"{inviter_name} wants to share a household ledger with you. "
            f"Your invitation code is <strong>{invitation.code}</strong>. "
            f"It expires on {invitation.expires_at:%Y-%m-%d}."
        ),
        link=link,
        button="Accept Invitation",
    )
    return await send_email_via_sendgrid(
        invitation.invitee_email, f"{inviter_name} invited you to {settings.APP_NAME}", body
    )


async def create_invitation(
    db: AsyncSession,
    account: Account,
    invitee_email: str,
    inviter_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Invitation:
    """
    Store a PENDING invitation for `invitee_email` and mail the code.

    The inviter's profile is created or renamed on the way and always takes
    the PARTNER_1 slot. Mail delivery is best effort.
    """
    if invitee_email.strip().lower() == account.email.lower():
        raise SelfInvitationError("You cannot invite yourself")

    member = await get_user_by_auth_id(account.id, db)
    if member is not None and member.partner_id is not None:
        raise PartnerAlreadyLinkedError("You are already linked with a partner")

    now = now or datetime.utcnow()
    name = inviter_name or (member.name if member and member.name else default_member_name(account))

    try:
        code = await _unique_code(db)
        await upsert_user_for_account(
            account.id, db, name=name, type=PartnerType.PARTNER_1, commit=False
        )
        invitation = await invitation_crud.create_invitation(
            inviter_id=account.id,
            invitee_email=invitee_email,
            code=code,
            expires_at=now + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
            db=db,
            commit=False,
        )
        await db.commit()
        await db.refresh(invitation)
    except Exception as e:
        logger.error(f"Error creating invitation from {account.email}: {str(e)}")
        await db.rollback()
        raise

    logger.info(f"Invitation {invitation.code} created by {account.email} for {invitee_email}")

    if not await send_invitation_email(invitation, name):
        logger.warning(f"Invitation {invitation.code} stored but email was not delivered")
    return invitation


async def get_invitation_by_code(db: AsyncSession, code: str, now: Optional[datetime] = None) -> Optional[Invitation]:
    return await invitation_crud.get_pending_invitation_by_code(code.strip().upper(), db, now=now)


async def _checked_invitation(db: AsyncSession, account: Account, code: str, now: Optional[datetime]) -> Invitation:
    invitation = await get_invitation_by_code(db, code, now=now)
    if invitation is None:
        raise InvitationNotFoundError("Invitation not found or no longer valid")
    if invitation.invitee_email != account.email:
        raise InvitationEmailMismatchError("This invitation was sent to a different email address")
    return invitation


async def accept_invitation(
    db: AsyncSession,
    account: Account,
    code: str,
    name: str,
    character: Optional[str] = None,
    now: Optional[datetime] = None,
) -> User:
    """
    Accept `code` as `account` and link both members.

    The status change, the invitee's profile and both partner pointers are
    written in one transaction. Returns the invitee's profile.
    """
    invitation = await _checked_invitation(db, account, code, now)

    if invitation.inviter_id == account.id:
        raise SelfInvitationError("You cannot accept your own invitation")

    inviter = await get_user_by_auth_id(invitation.inviter_id, db)
    invitee = await get_user_by_auth_id(account.id, db)

    if inviter is not None and inviter.partner_id is not None and (invitee is None or inviter.partner_id != invitee.id):
        raise PartnerAlreadyLinkedError("The inviter is already linked with another partner")
    if invitee is not None and invitee.partner_id is not None and (inviter is None or invitee.partner_id != inviter.id):
        raise PartnerAlreadyLinkedError("You are already linked with another partner")

    try:
        if inviter is None:
            inviter = await upsert_user_for_account(
                invitation.inviter_id, db, name="", type=PartnerType.PARTNER_1, commit=False
            )
        inviter_slot = inviter.type or PartnerType.PARTNER_1

        await invitation_crud.set_invitation_status(invitation, InvitationStatus.ACCEPTED, db, commit=False)
        invitee = await upsert_user_for_account(
            account.id, db, name=name, type=inviter_slot.other, character=character, commit=False
        )
        inviter.partner_id = invitee.id
        invitee.partner_id = inviter.id
        db.add_all([inviter, invitee])
        await db.commit()
        await db.refresh(invitee)
    except Exception as e:
        logger.error(f"Error accepting invitation {invitation.code}: {str(e)}")
        await db.rollback()
        raise

    logger.info(f"Invitation {invitation.code} accepted: {inviter.id} <-> {invitee.id}")
    return invitee


async def reject_invitation(
    db: AsyncSession,
    account: Account,
    code: str,
    now: Optional[datetime] = None,
) -> Invitation:
    invitation = await _checked_invitation(db, account, code, now)
    invitation = await invitation_crud.set_invitation_status(invitation, InvitationStatus.REJECTED, db)
    logger.info(f"Invitation {invitation.code} rejected by {account.email}")
    return invitation


@with_db_retry()
async def unlink_partner(db: AsyncSession, user: User) -> User:
    """Clear the partner link on both sides in one transaction."""
    # A retry starts after a rollback, which expired the instance
    await db.refresh(user)
    if user.partner_id is None:
        return user

    try:
        partner = await get_partner(user, db)
        if partner is not None and partner.partner_id == user.id:
            partner.partner_id = None
            db.add(partner)
        previous_partner_id = user.partner_id
        user.partner_id = None
        db.add(user)
        await db.commit()
        await db.refresh(user)
    except Exception as e:
        logger.error(f"Error unlinking partner for user {user.id}: {str(e)}")
        await db.rollback()
        raise

    logger.info(f"Partner link removed: {user.id} -/- {previous_partner_id}")
    return user


def to_read(invitation: Invitation, now: Optional[datetime] = None) -> InvitationRead:
    """Read model with the status as of `now` (stale PENDING rows read EXPIRED)."""
    read = InvitationRead.model_validate(invitation)
    return read.model_copy(update={"status": invitation.effective_status(now)})


async def list_sent_invitations(db: AsyncSession, account: Account, now: Optional[datetime] = None) -> List[InvitationRead]:
    invitations = await invitation_crud.get_sent_invitations(account.id, db)
    return [to_read(inv, now) for inv in invitations]


async def list_received_invitations(db: AsyncSession, account: Account, now: Optional[datetime] = None) -> List[InvitationRead]:
    invitations = await invitation_crud.get_received_invitations(account.email, db, now=now)
    return [to_read(inv, now) for inv in invitations]


async def get_household(db: AsyncSession, user: User) -> dict:
    partner = await get_user_by_id(user.partner_id, db) if user.partner_id else None
    return {"user": user, "partner": partner}
