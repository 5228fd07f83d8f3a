# app/utils/holdings.py
"""
Broker holdings on top of the KIS client: access-token reuse, holdings
totals for the dashboard, daily investment snapshots and the background
poller that keeps the latest holdings per member.
"""
import asyncio
import contextlib
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.kis import KisApiError, KisClient, KisHolding
from app.crud.investment import get_investments_for_household, upsert_snapshot
from app.crud.kis_connection import get_all_kis_connections, get_kis_connection, save_kis_token
from app.models.investment import InvestmentSnapshot
from app.models.kis_connection import KisConnection
from app.utils.aggregation import local_investment_value

logger = logging.getLogger(__name__)


@dataclass
class _CachedToken:
    access_token: str
    app_secret: str
    expires_at: datetime


class TokenCache:
    """In-process access-token cache keyed by (app key, sandbox flag).

    A token is served only while it is valid beyond the refresh buffer and
    only to callers presenting the same app secret it was issued for.
    """

    def __init__(self, buffer_seconds: Optional[int] = None):
        self.buffer = timedelta(
            seconds=settings.KIS_TOKEN_REFRESH_BUFFER_SECONDS if buffer_seconds is None else buffer_seconds
        )
        self._tokens: Dict[Tuple[str, bool], _CachedToken] = {}

    def get(self, app_key: str, app_secret: str, is_virtual: bool, now: Optional[datetime] = None) -> Optional[str]:
        key = (app_key, is_virtual)
        cached = self._tokens.get(key)
        if cached is None:
            return None
        now = now or datetime.utcnow()
        if cached.app_secret != app_secret or cached.expires_at <= now + self.buffer:
            del self._tokens[key]
            return None
        return cached.access_token

    def set(
        self,
        app_key: str,
        app_secret: str,
        is_virtual: bool,
        access_token: str,
        expires_in: int,
        now: Optional[datetime] = None,
    ) -> None:
        now = now or datetime.utcnow()
        self._tokens[(app_key, is_virtual)] = _CachedToken(
            access_token=access_token,
            app_secret=app_secret,
            expires_at=now + timedelta(seconds=expires_in),
        )

    def clear(self) -> None:
        self._tokens.clear()


@dataclass
class HoldingsResult:
    holdings: List[KisHolding] = field(default_factory=list)
    total_value: float = 0.0
    fetched_at: datetime = field(default_factory=datetime.utcnow)


async def get_access_token(
    db: AsyncSession,
    connection: KisConnection,
    client: KisClient,
    cache: TokenCache,
    force_refresh: bool = False,
) -> str:
    """
    Token for `connection`, issuing a new one only when needed.

    Lookup order: in-process cache, the token stored on the connection,
    then a fresh token from the broker, which is written back to the
    connection. Failing to store it only costs a reissue next time.
    """
    now = datetime.utcnow()
    app_key, app_secret, is_virtual = connection.app_key, connection.app_secret, connection.is_virtual
    user_id = connection.user_id
    if not force_refresh:
        token = cache.get(app_key, app_secret, is_virtual, now=now)
        if token:
            return token

        if connection.access_token and connection.token_expires_at and connection.token_expires_at > now + cache.buffer:
            remaining = int((connection.token_expires_at - now).total_seconds())
            cache.set(app_key, app_secret, is_virtual, connection.access_token, remaining, now=now)
            return connection.access_token

    issued = await client.issue_token(app_key, app_secret, is_virtual)
    cache.set(app_key, app_secret, is_virtual, issued.access_token, issued.expires_in, now=now)
    try:
        await save_kis_token(connection, issued.access_token, issued.expires_in, db)
    except Exception as e:
        logger.warning(f"Could not store KIS token for user {user_id}: {str(e)}")
        await db.rollback()
    return issued.access_token


async def fetch_holdings(
    db: AsyncSession,
    connection: KisConnection,
    client: KisClient,
    cache: TokenCache,
) -> HoldingsResult:
    user_id = connection.user_id
    args = (connection.app_key, connection.app_secret, connection.account_number, connection.is_virtual)
    token = await get_access_token(db, connection, client, cache)
    try:
        holdings = await client.get_holdings(token, *args)
    except KisApiError as e:
        if e.status_code not in (401, 403):
            raise
        # Token revoked on the broker side
        logger.info(f"KIS rejected the token for user {user_id}, issuing a new one")
        token = await get_access_token(db, connection, client, cache, force_refresh=True)
        holdings = await client.get_holdings(token, *args)

    return HoldingsResult(
        holdings=holdings,
        total_value=sum(h.total_value for h in holdings),
        fetched_at=datetime.utcnow(),
    )


async def holdings_total_or_zero(
    db: AsyncSession,
    connection: Optional[KisConnection],
    client: KisClient,
    cache: TokenCache,
) -> float:
    """Holdings total for the dashboard; any failure reads as 0 so local data is used."""
    if connection is None:
        return 0.0
    user_id = connection.user_id
    try:
        result = await fetch_holdings(db, connection, client, cache)
        return result.total_value
    except Exception as e:
        logger.warning(f"Falling back to local investments for user {user_id}: {str(e)}")
        return 0.0


async def household_holdings_total(
    db: AsyncSession,
    user_ids: Sequence[uuid.UUID],
    client: KisClient,
    cache: TokenCache,
    latest: Optional[Dict[uuid.UUID, HoldingsResult]] = None,
) -> Tuple[float, bool]:
    """Summed holdings of every household member with a broker connection.

    Uses the poller's latest result when there is one. Returns the total
    and whether any member is connected.
    """
    total = 0.0
    connected = False
    for user_id in user_ids:
        connection = await get_kis_connection(user_id, db)
        if connection is None:
            continue
        connected = True
        if latest and user_id in latest:
            total += latest[user_id].total_value
        else:
            total += await holdings_total_or_zero(db, connection, client, cache)
    return total, connected


async def save_daily_snapshot(
    db: AsyncSession,
    user_id: uuid.UUID,
    investment_amount: float,
    kis_total_value: float = 0.0,
    today: Optional[date] = None,
) -> InvestmentSnapshot:
    today = today or datetime.utcnow().date()
    snapshot = await upsert_snapshot(user_id, today, investment_amount, kis_total_value, db)
    logger.info(f"Investment snapshot saved for user {user_id} on {today}: {snapshot.value}")
    return snapshot


class HoldingsPoller:
    """Refreshes every broker connection on a fixed interval.

    Results are kept per member in `latest`; whichever refresh finishes
    last wins. Each refresh also writes that day's investment snapshot.
    """

    def __init__(
        self,
        client: KisClient,
        cache: TokenCache,
        session_factory: Callable[[], AsyncSession] = AsyncSessionLocal,
        interval: Optional[float] = None,
    ):
        self.client = client
        self.cache = cache
        self.session_factory = session_factory
        self.interval = settings.KIS_REFRESH_INTERVAL_SECONDS if interval is None else interval
        self.latest: Dict[uuid.UUID, HoldingsResult] = {}
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def refresh_connection(self, db: AsyncSession, connection: KisConnection) -> HoldingsResult:
        user_id = connection.user_id
        result = await fetch_holdings(db, connection, self.client, self.cache)
        self.latest[user_id] = result

        investments = await get_investments_for_household([user_id], db)
        local_value = local_investment_value(investments, datetime.utcnow().date())
        await save_daily_snapshot(db, user_id, local_value, result.total_value)
        return result

    async def refresh_once(self) -> int:
        """Refresh all connections; returns how many succeeded."""
        refreshed = 0
        async with self.session_factory() as db:
            user_ids = [c.user_id for c in await get_all_kis_connections(db)]
            for user_id in user_ids:
                try:
                    # Re-read after a failed iteration rolled the session back
                    connection = await get_kis_connection(user_id, db)
                    if connection is None:
                        continue
                    await self.refresh_connection(db, connection)
                    refreshed += 1
                except Exception as e:
                    logger.warning(f"Holdings refresh failed for user {user_id}: {str(e)}")
                    await db.rollback()
        return refreshed

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh_once()
            except Exception as e:
                logger.error(f"Holdings poller iteration failed: {str(e)}")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"🚀 Holdings poller started (every {self.interval}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Holdings poller stopped")
