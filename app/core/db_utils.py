"""
Database utilities for transient connection failures
"""
import asyncio
import functools
import logging
from typing import Callable, Any, TypeVar, cast, Awaitable

from sqlalchemy.exc import DBAPIError, OperationalError

logger = logging.getLogger(__name__)

T = TypeVar('T')

_CONNECTION_ERROR_NAMES = (
    "ConnectionError",
    "ConnectionDoesNotExistError",
    "ConnectionRefusedError",
    "InterfaceError",
)


def is_connection_error(exc: BaseException) -> bool:
    """True for errors worth retrying: lost or refused database connections."""
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    error_name = type(exc).__name__
    return any(name in error_name for name in _CONNECTION_ERROR_NAMES)


def with_db_retry(
    max_retries: int = 3,
    retry_delay: float = 0.5
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Retry a coroutine when the database connection drops.

    The wrapped operation must be safe to run again from the start, e.g. a
    single transaction that commits at its end.

    Args:
        max_retries: Maximum number of retries before giving up
        retry_delay: Base delay in seconds, doubled on every attempt
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            retries = 0
            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    if not is_connection_error(e) or retries >= max_retries:
                        if retries:
                            logger.error(
                                f"{func.__name__} failed after {retries} retries: {e}"
                            )
                        raise
                    retries += 1
                    delay = retry_delay * (2 ** (retries - 1))
                    logger.warning(
                        f"Database connection error in {func.__name__}: {str(e)}. "
                        f"Retrying in {delay:.2f}s... (Attempt {retries}/{max_retries})"
                    )
                    await asyncio.sleep(delay)

        return cast(Callable[..., Awaitable[T]], wrapper)

    return decorator
