# app/api/v1/routes/invitations.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.auth import Account
from app.core.database import get_async_session
from app.schemas.invitation import InvitationAccept, InvitationCreate, InvitationRead
from app.schemas.user import UserRead
from app.api.deps import get_current_account
from app.utils import invitations as workflow
from app.utils.invitations import (
    InvitationEmailMismatchError,
    InvitationError,
    InvitationNotFoundError,
    PartnerAlreadyLinkedError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invitations", tags=["Invitations"])


def _http_error(exc: InvitationError) -> HTTPException:
    if isinstance(exc, InvitationNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvitationEmailMismatchError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, PartnerAlreadyLinkedError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))


def _db_error(action: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Database error occurred while {action}"
    )


@router.post("", response_model=InvitationRead, status_code=status.HTTP_201_CREATED)
async def send_invitation(
    invitation_in: InvitationCreate,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    account: Account = Depends(get_current_account),
):
    """Invite a partner by email. The code is mailed and also returned here."""
    try:
        invitation = await workflow.create_invitation(
            db, account, invitation_in.invitee_email, invitation_in.inviter_name
        )
    except InvitationError as e:
        raise _http_error(e)
    except SQLAlchemyError:
        raise _db_error("creating the invitation")
    return workflow.to_read(invitation)


@router.get("/sent", response_model=List[InvitationRead])
async def read_sent_invitations(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    account: Account = Depends(get_current_account),
):
    return await workflow.list_sent_invitations(db, account)


@router.get("/received", response_model=List[InvitationRead])
async def read_received_invitations(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    account: Account = Depends(get_current_account),
):
    """Pending, unexpired invitations addressed to the caller's email."""
    return await workflow.list_received_invitations(db, account)


@router.get("/{code}", response_model=InvitationRead)
async def read_invitation(
    code: str,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    account: Account = Depends(get_current_account),
):
    invitation = await workflow.get_invitation_by_code(db, code)
    if invitation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invitation not found or no longer valid")
    return workflow.to_read(invitation)


@router.post("/{code}/accept", response_model=UserRead)
async def accept_invitation(
    code: str,
    accept_in: InvitationAccept,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    account: Account = Depends(get_current_account),
):
    """Accept an invitation and link both profiles. Returns the caller's profile."""
    try:
        return await workflow.accept_invitation(
            db, account, code, name=accept_in.name, character=accept_in.character
        )
    except InvitationError as e:
        raise _http_error(e)
    except SQLAlchemyError:
        raise _db_error("accepting the invitation")


@router.post("/{code}/reject", response_model=InvitationRead)
async def reject_invitation(
    code: str,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    account: Account = Depends(get_current_account),
):
    try:
        invitation = await workflow.reject_invitation(db, account, code)
    except InvitationError as e:
        raise _http_error(e)
    except SQLAlchemyError:
        await db.rollback()
        raise _db_error("rejecting the invitation")
    return workflow.to_read(invitation)
