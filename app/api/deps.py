# app/api/deps.py
from typing import Dict, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import jwt
import logging
import uuid

from app.core.database import get_async_session
from app.core.auth import Account, JWT_AUDIENCE
from app.core.config import settings
from app.core.kis import KisClient
from app.crud.user import get_user_by_auth_id, upsert_user_for_account
from app.models.user import User
from app.utils.holdings import HoldingsResult, TokenCache
from app.utils.invitations import default_member_name
from app.utils.store import HouseholdStore, SqlHouseholdRepository

logger = logging.getLogger(__name__)

# Security schemes
optional_security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_account(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
) -> Account:
    """
    Resolve the signed-in account from the bearer token.

    The token may come from:
    - the Authorization header
    - an `access_token` cookie
    """
    token = None
    if credentials and credentials.credentials:
        token = credentials.credentials

    if not token:
        token = request.cookies.get("access_token")
        # Remove "Bearer " prefix if present in cookie
        if token and token.startswith("Bearer "):
            token = token[7:]

    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    account_id_str = payload.get("sub")
    if not account_id_str:
        raise _unauthorized("Invalid token: missing user ID")

    try:
        account_id = uuid.UUID(account_id_str)
    except ValueError:
        raise _unauthorized("Invalid user ID format in token")

    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalars().first()

    if not account:
        raise _unauthorized("User not found")
    if not account.is_active:
        raise _unauthorized("Inactive user")

    return account


async def get_current_member(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """Household profile of the signed-in account, created on first use."""
    member = await get_user_by_auth_id(account.id, db)
    if member is None:
        member = await upsert_user_for_account(account.id, db, name=default_member_name(account))
        logger.info(f"Created household profile for {account.email}")
    return member


async def get_household_store(
    member: User = Depends(get_current_member),
    db: AsyncSession = Depends(get_async_session),
) -> HouseholdStore:
    return HouseholdStore(SqlHouseholdRepository(db, member))


def get_kis_client(request: Request) -> KisClient:
    return request.app.state.kis_client


def get_token_cache(request: Request) -> TokenCache:
    return request.app.state.token_cache


def get_latest_holdings(request: Request) -> Dict[uuid.UUID, HoldingsResult]:
    poller = getattr(request.app.state, "holdings_poller", None)
    return poller.latest if poller is not None else {}
