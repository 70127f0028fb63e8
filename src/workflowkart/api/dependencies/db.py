"""Database session dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.workflowkart.core.db import get_session


async def get_db_session() -> AsyncGenerator[AsyncSession]:
    """Get database session for the request."""
    async with get_session() as session:
        yield session


async def get_log_db_session() -> AsyncGenerator[AsyncSession]:
    """Get an isolated session for workflow log writes.

    Commits independently from execution records, so log entries survive
    (and fail) on their own.
    """
    async with get_session() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]
LogDBSession = Annotated[AsyncSession, Depends(get_log_db_session)]
