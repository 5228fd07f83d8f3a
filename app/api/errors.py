# app/api/errors.py
import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from app.utils.store import RecordNotFoundError

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(label: str) -> Iterator[None]:
    """Translate household store failures into HTTP errors."""
    try:
        yield
    except RecordNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    except SQLAlchemyError as e:
        logger.error(f"Database error on {label}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database error occurred while saving {label.lower()}"
        )
