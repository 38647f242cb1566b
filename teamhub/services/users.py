"""User directory: read-only display attributes for players, managers and organizers."""
from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.models import User
from teamhub.schemas import UserInfo
from teamhub.services.storage import storage_errors

UNKNOWN_PLAYER = "Unknown Player"


@storage_errors
async def get_by_id(session: AsyncSession, user_id: int) -> Optional[UserInfo]:
    """Get display attributes for one user, or None."""
    user = await session.get(User, user_id)
    return UserInfo.model_validate(user) if user else None


@storage_errors
async def get_by_ids(session: AsyncSession, user_ids: Iterable[int]) -> dict[int, UserInfo]:
    """Batch lookup. Ids with no user are absent from the result."""
    ids = set(user_ids)
    if not ids:
        return {}
    result = await session.execute(select(User).where(User.id.in_(ids)))
    return {u.id: UserInfo.model_validate(u) for u in result.scalars().all()}


@storage_errors
async def get_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


def display_name(info: Optional[UserInfo]) -> str:
    """Human-readable name, never an empty string."""
    if not info:
        return UNKNOWN_PLAYER
    return info.display_name


def email_of(info: Optional[UserInfo]) -> str:
    return info.email if info else ""
