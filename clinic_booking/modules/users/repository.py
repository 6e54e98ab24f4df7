# clinic_booking/modules/users/repository.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.modules.users.models import User


async def get_by_id(session: AsyncSession, user_id: int) -> Optional[User]:
    """
    Returns a User by primary key or None if not found.
    """
    return await session.get(User, user_id)


async def exists(session: AsyncSession, user_id: int) -> bool:
    stmt = select(User.id).where(User.id == user_id)
    return (await session.execute(stmt)).scalar_one_or_none() is not None
