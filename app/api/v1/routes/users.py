# app/api/v1/routes/users.py
import logging

from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_async_session
from app.crud.user import update_user_profile
from app.models.user import User
from app.schemas.user import HouseholdRead, UserRead, UserUpdate
from app.api.deps import get_current_member
from app.utils.invitations import get_household, unlink_partner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["User Management"])

# 1) GET /users/me
@router.get("/me", response_model=HouseholdRead)
async def read_own_profile(
    request: Request,
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_session),
):
    """Current member's profile and, once linked, the partner's."""
    return await get_household(db, member)

# 2) PATCH /users/me
@router.patch("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    request: Request,
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_session),
):
    """Update current member's name or character"""
    if not user_update.dict(exclude_unset=True):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update"
        )
    try:
        return await update_user_profile(member, user_update, db)
    except SQLAlchemyError as e:
        logger.error(f"Database error while updating profile: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while updating profile"
        )

# 3) DELETE /users/me/partner
@router.delete("/me/partner", response_model=UserRead)
async def unlink_own_partner(
    request: Request,
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_session),
):
    """Dissolve the partner link on both sides"""
    if member.partner_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are not linked with a partner"
        )
    try:
        return await unlink_partner(db, member)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while unlinking partner"
        )
