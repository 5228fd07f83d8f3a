# app/core/database.py
import logging
from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import settings

logger = logging.getLogger(__name__)


def engine_options() -> Dict[str, Any]:
    """Engine keyword arguments for the configured database."""
    options: Dict[str, Any] = {"echo": settings.DEBUG, "future": True}

    # SQLite (local runs, tests) has no queue pool to size
    if settings.is_sqlite:
        return options

    options.update({
        "pool_size": 5,
        "max_overflow": 5,
        "pool_timeout": 30,       # Seconds to wait for a free connection
        "pool_pre_ping": True,
        "pool_recycle": 300,
    })

    if settings.is_supabase:
        # PgBouncer in transaction mode cannot keep prepared statements
        options["connect_args"] = {
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "timeout": 10,
        }
        logger.info("🔧 Configured engine for Supabase/PgBouncer (prepared statements disabled)")
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options())

# Shared by request handlers and the holdings poller
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

Base = declarative_base()


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        await session.close()
