"""Translate persistence failures into StorageError."""
from __future__ import annotations

import functools
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teamhub.errors import StorageError

logger = logging.getLogger("teamhub.storage")


def storage_errors(func):
    """Wrap a service coroutine whose first argument is the session.

    On SQLAlchemyError the session is rolled back and StorageError is raised.
    Domain errors pass through untouched.
    """

    @functools.wraps(func)
    async def wrapper(session: AsyncSession, *args, **kwargs):
        try:
            return await func(session, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Storage failure in %s: %s", func.__name__, e)
            await session.rollback()
            raise StorageError(f"Storage failure during {func.__name__}") from e

    return wrapper
