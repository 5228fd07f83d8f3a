# app/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional
import uuid

from app.models.user import User, PartnerType
from app.schemas.user import UserUpdate

async def get_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_auth_id(auth_user_id: uuid.UUID, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.auth_user_id == auth_user_id))
    return result.scalar_one_or_none()

async def get_partner(user: User, db: AsyncSession) -> Optional[User]:
    if user.partner_id is None:
        return None
    return await get_user_by_id(user.partner_id, db)

async def upsert_user_for_account(
    auth_user_id: uuid.UUID,
    db: AsyncSession,
    name: Optional[str] = None,
    type: Optional[PartnerType] = None,
    character: Optional[str] = None,
    commit: bool = True,
) -> User:
    """Insert or update the profile keyed by its auth account.

    Only the given fields are written. With commit=False the change is
    flushed so the caller can finish its own transaction.
    """
    user = await get_user_by_auth_id(auth_user_id, db)
    if user is None:
        user = User(auth_user_id=auth_user_id, name=name or "")
        db.add(user)
    if name is not None:
        user.name = name
    if type is not None:
        user.type = type
    if character is not None:
        user.character = character.strip() or None
    if commit:
        await db.commit()
        await db.refresh(user)
    else:
        await db.flush()
    return user

async def update_user_profile(user: User, user_in: UserUpdate, db: AsyncSession) -> User:
    for field, value in user_in.dict(exclude_unset=True).items():
        if field == "name" and value is None:
            continue
        if field == "character" and value is not None:
            value = value.strip() or None
        setattr(user, field, value)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user
