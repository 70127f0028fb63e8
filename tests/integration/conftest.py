"""Integration test fixtures for database operations.

Runs against an in-memory SQLite database shared through a StaticPool, so
every session in a test sees the same tables and rows.
"""

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from src.workflowkart import models  # noqa: F401
from src.workflowkart.core import redis as redis_core
from src.workflowkart.core.db import get_session
from src.workflowkart.models import User, Workflow
from tests.helpers import create_user, create_workflow


@pytest.fixture(autouse=True)
async def _reset_redis_between_tests() -> AsyncGenerator[None]:
    """Reset Redis state between tests.

    Redis clients hold references to their event loop, and pytest creates a
    new loop per test.
    """
    redis_core.reset_redis_state()
    yield
    await redis_core.close_redis()


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """In-memory SQLite engine with all tables created."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Database session for arranging and inspecting test data."""
    async with get_session(engine) as db_session:
        yield db_session


@pytest.fixture
async def log_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Separate session for workflow log writes."""
    async with get_session(engine) as db_session:
        yield db_session


@pytest.fixture
async def owner(session: AsyncSession) -> User:
    return await create_user(session, name="Owner")


@pytest.fixture
async def stranger(session: AsyncSession) -> User:
    return await create_user(session, name="Stranger")


@pytest.fixture
async def workflow(session: AsyncSession, owner: User) -> Workflow:
    """Private, unreviewed workflow owned by `owner`."""
    return await create_workflow(session, owner)
