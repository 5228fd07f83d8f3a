# app/api/v1/routes/dashboard.py
import logging
from datetime import datetime
from typing import Dict, List, Optional
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import get_async_session
from app.core.kis import KisClient
from app.crud.investment import get_snapshots_for_household
from app.models.user import User
from app.schemas.dashboard import DashboardSummary, MonthlySummaryRead
from app.api.deps import (
    get_current_member,
    get_household_store,
    get_kis_client,
    get_latest_holdings,
    get_token_cache,
)
from app.utils.aggregation import build_dashboard, month_end, month_end_investment, monthly_history
from app.utils.holdings import HoldingsResult, TokenCache, household_holdings_total
from app.utils.store import HouseholdStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


async def _load_household(store: HouseholdStore, user_ids: List[uuid.UUID], db: AsyncSession):
    try:
        records = await store.load_all()
        snapshots = await get_snapshots_for_household(user_ids, db)
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database error occurred while loading household records"
        )
    return records, snapshots


@router.get("/summary", response_model=DashboardSummary)
async def get_dashboard_summary(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    store: HouseholdStore = Depends(get_household_store),
    client: KisClient = Depends(get_kis_client),
    cache: TokenCache = Depends(get_token_cache),
    latest: Dict[uuid.UUID, HoldingsResult] = Depends(get_latest_holdings),
):
    """
    Household totals for one month (default: the current month):
    - **current**: income, expense, cash balance, savings, investments, assets
    - **previous**: the month before, valued from its month-end snapshot
    - **change**: month-over-month asset change, absolute and in percent
    - **history**: recent months with recorded activity

    Broker holdings replace locally entered investments when a household
    member is connected; broker failures fall back to local data.
    """
    user_ids = list(member.household_ids)
    today = datetime.utcnow().date()
    if (year is None) != (month is None):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Provide both year and month")

    viewing_current = year is None or (year, month) == (today.year, today.month)
    if not viewing_current:
        today = month_end(year, month)

    holdings_total, connected = 0.0, False
    if viewing_current:
        holdings_total, connected = await household_holdings_total(db, user_ids, client, cache, latest)

    records, snapshots = await _load_household(store, user_ids, db)
    if not viewing_current:
        holdings_total = month_end_investment(snapshots, today.year, today.month, records.investments) or 0.0

    summary = build_dashboard(
        records,
        snapshots,
        today,
        holdings_total=holdings_total,
        include_deposits=settings.COUNT_DEPOSITS_AS_EXPENSE,
        living_category=settings.LIVING_EXPENSE_CATEGORY,
        history_months=settings.HISTORY_MONTHS,
    )
    return {
        **summary,
        "holdings_total": holdings_total,
        "holdings_connected": connected,
    }


@router.get("/history", response_model=List[MonthlySummaryRead])
async def get_dashboard_history(
    months: int = Query(settings.HISTORY_MONTHS, ge=1, le=24),
    db: AsyncSession = Depends(get_async_session),
    member: User = Depends(get_current_member),
    store: HouseholdStore = Depends(get_household_store),
    client: KisClient = Depends(get_kis_client),
    cache: TokenCache = Depends(get_token_cache),
    latest: Dict[uuid.UUID, HoldingsResult] = Depends(get_latest_holdings),
):
    """Monthly totals, oldest first, for months with recorded activity."""
    user_ids = list(member.household_ids)
    holdings_total, _ = await household_holdings_total(db, user_ids, client, cache, latest)
    records, snapshots = await _load_household(store, user_ids, db)
    return monthly_history(
        records,
        snapshots,
        datetime.utcnow().date(),
        months=months,
        holdings_total=holdings_total,
        include_deposits=settings.COUNT_DEPOSITS_AS_EXPENSE,
        living_category=settings.LIVING_EXPENSE_CATEGORY,
    )
