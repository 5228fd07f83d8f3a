# app/crud/kis_connection.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List, Optional
from datetime import datetime, timedelta
import uuid

from app.models.kis_connection import KisConnection
from app.schemas.kis import KisConnectionSave

async def get_kis_connection(user_id: uuid.UUID, db: AsyncSession) -> Optional[KisConnection]:
    result = await db.execute(select(KisConnection).where(KisConnection.user_id == user_id))
    return result.scalar_one_or_none()

async def get_all_kis_connections(db: AsyncSession) -> List[KisConnection]:
    result = await db.execute(select(KisConnection))
    return result.scalars().all()

async def save_kis_connection(user_id: uuid.UUID, conn_in: KisConnectionSave, db: AsyncSession) -> KisConnection:
    """Insert or update the member's credentials.

    A stored token is dropped when the credentials change, since it was
    issued for the old app key.
    """
    connection = await get_kis_connection(user_id, db)
    if connection is None:
        connection = KisConnection(user_id=user_id)
        db.add(connection)
    elif (connection.app_key, connection.app_secret, connection.is_virtual) != (
        conn_in.app_key, conn_in.app_secret, conn_in.is_virtual
    ):
        connection.access_token = None
        connection.token_expires_at = None
    for field, value in conn_in.dict().items():
        setattr(connection, field, value)
    await db.commit()
    await db.refresh(connection)
    return connection

async def save_kis_token(connection: KisConnection, access_token: str, expires_in: int, db: AsyncSession) -> KisConnection:
    connection.access_token = access_token
    connection.token_expires_at = datetime.utcnow() + timedelta(seconds=expires_in)
    db.add(connection)
    await db.commit()
    await db.refresh(connection)
    return connection

async def delete_kis_connection(connection: KisConnection, db: AsyncSession) -> None:
    await db.delete(connection)
    await db.commit()
