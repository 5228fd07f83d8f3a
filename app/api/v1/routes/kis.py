# app/api/v1/routes/kis.py
import logging
from datetime import datetime
from typing import Dict, List
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_async_session
from app.core.kis import KisAccountNumberError, KisApiError, KisClient, parse_account_number
from app.crud.investment import get_snapshots_for_household
from app.crud.kis_connection import delete_kis_connection, get_kis_connection, save_kis_connection
from app.models.kis_connection import KisConnection
from app.models.user import User
from app.schemas.investment import InvestmentSnapshotCreate, InvestmentSnapshotRead
from app.schemas.kis import (
    KisAccountRead,
    KisConnectionRead,
    KisConnectionSave,
    KisHoldingsResponse,
    KisPriceRead,
    KisTokenRead,
)
from app.api.deps import get_current_member, get_kis_client, get_latest_holdings, get_token_cache
from app.utils.holdings import (
    HoldingsResult,
    TokenCache,
    fetch_holdings,
    get_access_token,
    save_daily_snapshot,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kis", tags=["Broker"])


def _broker_error(exc: KisApiError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


async def _require_connection(member: User, db: AsyncSession) -> KisConnection:
    connection = await get_kis_connection(member.id, db)
    if connection is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No broker connection configured")
    return connection


# ------------------------------------------------------------
# CONNECTION
# ------------------------------------------------------------
@router.get("/connection", response_model=KisConnectionRead)
async def read_connection(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await _require_connection(member, db)


@router.put("/connection", response_model=KisConnectionRead)
async def save_connection(
    conn_in: KisConnectionSave,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    """Store the member's app key, app secret and account number."""
    try:
        parse_account_number(conn_in.account_number)
    except KisAccountNumberError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    try:
        return await save_kis_connection(member.id, conn_in, db)
    except SQLAlchemyError as e:
        logger.error(f"Database error while saving broker connection: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while saving broker connection"
        )


@router.delete("/connection", status_code=status.HTTP_204_NO_CONTENT)
async def remove_connection(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    latest: Dict[uuid.UUID, HoldingsResult] = Depends(get_latest_holdings),
):
    connection = await _require_connection(member, db)
    await delete_kis_connection(connection, db)
    latest.pop(member.id, None)
    return None


# ------------------------------------------------------------
# BROKER CALLS
# ------------------------------------------------------------
@router.post("/token", response_model=KisTokenRead)
async def issue_token(
    request: Request,
    force_refresh: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    client: KisClient = Depends(get_kis_client),
    cache: TokenCache = Depends(get_token_cache),
):
    """Make sure a usable access token exists. The token itself stays on the server."""
    connection = await _require_connection(member, db)
    try:
        await get_access_token(db, connection, client, cache, force_refresh=force_refresh)
    except KisApiError as e:
        raise _broker_error(e)

    connection = await _require_connection(member, db)
    expires_in = 0
    if connection.token_expires_at:
        expires_in = max(int((connection.token_expires_at - datetime.utcnow()).total_seconds()), 0)
    return {
        "token_type": "Bearer",
        "expires_in": expires_in,
        "access_token_token_expired": (
            connection.token_expires_at.strftime("%Y-%m-%d %H:%M:%S") if connection.token_expires_at else None
        ),
    }


@router.get("/accounts", response_model=List[KisAccountRead])
async def read_accounts(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    client: KisClient = Depends(get_kis_client),
    cache: TokenCache = Depends(get_token_cache),
):
    connection = await _require_connection(member, db)
    app_key, app_secret, is_virtual = connection.app_key, connection.app_secret, connection.is_virtual
    try:
        token = await get_access_token(db, connection, client, cache)
        return await client.get_accounts(token, app_key, app_secret, is_virtual)
    except KisApiError as e:
        raise _broker_error(e)


@router.get("/holdings", response_model=KisHoldingsResponse)
async def read_holdings(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    client: KisClient = Depends(get_kis_client),
    cache: TokenCache = Depends(get_token_cache),
    latest: Dict[uuid.UUID, HoldingsResult] = Depends(get_latest_holdings),
):
    """Live holdings of the member's broker account."""
    member_id = member.id
    connection = await _require_connection(member, db)
    try:
        result = await fetch_holdings(db, connection, client, cache)
    except KisAccountNumberError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except KisApiError as e:
        raise _broker_error(e)
    latest[member_id] = result
    return result


@router.get("/price/{stock_code}", response_model=KisPriceRead)
async def read_price(
    stock_code: str,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    client: KisClient = Depends(get_kis_client),
    cache: TokenCache = Depends(get_token_cache),
):
    connection = await _require_connection(member, db)
    app_key, app_secret, is_virtual = connection.app_key, connection.app_secret, connection.is_virtual
    try:
        token = await get_access_token(db, connection, client, cache)
        return await client.get_price(token, app_key, app_secret, stock_code, is_virtual)
    except KisApiError as e:
        raise _broker_error(e)


# ------------------------------------------------------------
# SNAPSHOTS
# ------------------------------------------------------------
@router.post("/snapshot", response_model=InvestmentSnapshotRead)
async def save_snapshot(
    snapshot_in: InvestmentSnapshotCreate,
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    """Record today's investment valuation; a second call on the same day overwrites it."""
    try:
        return await save_daily_snapshot(
            db, member.id, snapshot_in.investment_amount, snapshot_in.kis_total_value
        )
    except SQLAlchemyError as e:
        logger.error(f"Database error while saving snapshot: {str(e)}")
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while saving snapshot"
        )


@router.get("/snapshots", response_model=List[InvestmentSnapshotRead])
async def read_snapshots(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
):
    return await get_snapshots_for_household(member.household_ids, db)
