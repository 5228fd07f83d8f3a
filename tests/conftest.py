import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("FRONTEND_URL", "http://localhost:3000")
os.environ["SENDGRID_API_KEY"] = ""
os.environ["KIS_POLLING_ENABLED"] = "false"

import json
import uuid
from typing import Callable, Dict, Optional

import httpx
import pytest
import pytest_asyncio
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.main import app
from app.api.deps import get_current_account, get_kis_client, get_latest_holdings, get_token_cache
from app.core.auth import Account
from app.core.database import Base, get_async_session
from app.core.kis import KisClient
from app.crud.user import upsert_user_for_account
from app.models.user import User
from app.utils.holdings import TokenCache


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_account(db) -> Callable:
    async def _make(email: str) -> Account:
        account = Account(
            email=email,
            hashed_password="not-a-real-hash",
            is_active=True,
            is_verified=True,
        )
        db.add(account)
        await db.commit()
        await db.refresh(account)
        return account
    return _make


@pytest.fixture
def make_member(db, make_account) -> Callable:
    async def _make(email: str, name: Optional[str] = None) -> User:
        account = await make_account(email)
        return await upsert_user_for_account(account.id, db, name=name or email.split("@")[0])
    return _make


def kis_handler(routes: Dict[str, dict]) -> Callable[[httpx.Request], httpx.Response]:
    """MockTransport handler answering by URL path; unknown paths fail with 500."""
    def handler(request: httpx.Request) -> httpx.Response:
        body = routes.get(request.url.path)
        if body is None:
            return httpx.Response(500, text="unexpected call")
        return httpx.Response(200, content=json.dumps(body), headers={"Content-Type": "application/json"})
    return handler


HOLDINGS_RESPONSE = {
    "rt_cd": "0",
    "msg1": "OK",
    "output1": [
        {
            "pdno": "005930",
            "prdt_name": "삼성전자",
            "hldg_qty": "10",
            "pchs_avg_pric": "70000.0",
            "prpr": "75000",
            "evlu_amt": "750000",
            "evlu_pfls_amt": "50000",
            "evlu_pfls_rt": "7.14",
        },
        {
            "pdno": "000660",
            "prdt_name": "SK하이닉스",
            "hldg_qty": "2",
            "pchs_avg_pric": "120000",
            "prpr": "125000",
            "evlu_amt": "250000",
            "evlu_pfls_amt": "10000",
            "evlu_pfls_rt": "4.17",
        },
    ],
}

TOKEN_RESPONSE = {
    "access_token": "issued-token",
    "token_type": "Bearer",
    "expires_in": 86400,
    "access_token_token_expired": "2030-01-01 00:00:00",
}


@pytest.fixture
def kis_routes() -> Dict[str, dict]:
    return {
        "/oauth2/tokenP": TOKEN_RESPONSE,
        "/uapi/domestic-stock/v1/trading/inquire-balance": HOLDINGS_RESPONSE,
    }


@pytest_asyncio.fixture
async def kis_client(kis_routes):
    client = KisClient(transport=httpx.MockTransport(kis_handler(kis_routes)))
    yield client
    await client.aclose()


@pytest.fixture
def current() -> Dict[str, uuid.UUID]:
    """Holds the id of the account the API client acts as."""
    return {}


@pytest_asyncio.fixture
async def client(session_factory, current, kis_client):
    async def _session():
        async with session_factory() as session:
            yield session

    async def _account(db: AsyncSession = Depends(get_async_session)) -> Account:
        return await db.get(Account, current["account_id"])

    latest = {}
    cache = TokenCache()
    app.dependency_overrides[get_async_session] = _session
    app.dependency_overrides[get_current_account] = _account
    app.dependency_overrides[get_kis_client] = lambda: kis_client
    app.dependency_overrides[get_token_cache] = lambda: cache
    app.dependency_overrides[get_latest_holdings] = lambda: latest

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
