"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Set env before any app imports: testing disables the request limiter
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters-long")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator

import pytest
from fakeredis import aioredis as fakeredis_aio
from redis.asyncio import Redis

from src.workflowkart.core import redis as redis_core
from src.workflowkart.core.config import get_settings
from src.workflowkart.services.factory import get_rate_limiter_gate

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_rate_limiter_gate() -> None:
    """Drop the process-wide gate so a cached script SHA never leaks between tests."""
    get_rate_limiter_gate.cache_clear()
    yield
    get_rate_limiter_gate.cache_clear()


# --- Redis Test Fixtures (shared) ---


@pytest.fixture
async def fake_redis() -> AsyncGenerator[Redis]:
    """Provides a fakeredis client for testing.

    Returns an in-memory Redis implementation with Lua scripting, so the
    sliding window script runs as it would on a real server.
    """
    client = fakeredis_aio.FakeRedis(decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
async def mock_redis(fake_redis: Redis, monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[Redis]:
    """Patches get_redis() to return fakeredis client.

    Patches both the redis module and the rate limiter, which imports
    get_redis by name.
    """
    redis_core.reset_redis_state()

    async def _get_fake_redis() -> Redis:
        return fake_redis

    monkeypatch.setattr("src.workflowkart.core.redis.get_redis", _get_fake_redis)
    monkeypatch.setattr("src.workflowkart.core.rate_limit.get_redis", _get_fake_redis)
    monkeypatch.setattr("src.workflowkart.core.health.get_redis", _get_fake_redis)
    yield fake_redis
    redis_core.reset_redis_state()


@pytest.fixture
async def mock_redis_unavailable(monkeypatch: pytest.MonkeyPatch) -> AsyncGenerator[None]:
    """Patches get_redis() to return None (simulates Redis unavailable)."""
    redis_core.reset_redis_state()

    async def _get_none() -> None:
        return None

    monkeypatch.setattr("src.workflowkart.core.redis.get_redis", _get_none)
    monkeypatch.setattr("src.workflowkart.core.rate_limit.get_redis", _get_none)
    monkeypatch.setattr("src.workflowkart.core.health.get_redis", _get_none)
    yield
    redis_core.reset_redis_state()
