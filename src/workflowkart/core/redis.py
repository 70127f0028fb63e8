"""Shared Redis client.

The execution rate limiter fails closed without Redis, so a missed connection
must not stick: after a failure the client is retried once
``redis_retry_seconds`` have passed instead of staying disabled until restart.
"""

import time

from redis.asyncio import Redis

from src.workflowkart.core.config import get_settings
from src.workflowkart.core.logging import get_logger

logger = get_logger(__name__)

_client: Redis | None = None
_last_failure: float | None = None
_warned_unconfigured: bool = False


async def get_redis() -> Redis | None:
    """Return the shared client, or None while Redis is unconfigured or unreachable."""
    global _client, _last_failure, _warned_unconfigured

    if _client is not None:
        return _client

    settings = get_settings()
    if not settings.redis_url:
        if not _warned_unconfigured:
            logger.warning("Redis not configured (REDIS_URL not set), executions will be refused")
            _warned_unconfigured = True
        return None

    since_failure = time.monotonic() - _last_failure if _last_failure is not None else None
    if since_failure is not None and since_failure < settings.redis_retry_seconds:
        return None

    client = Redis.from_url(
        settings.redis_url,
        max_connections=settings.redis_pool_size,
        decode_responses=True,
    )
    try:
        await client.ping()  # type: ignore[misc]
    except Exception as e:
        _last_failure = time.monotonic()
        logger.warning(
            "Redis unreachable",
            error=str(e),
            retry_in_seconds=settings.redis_retry_seconds,
        )
        await client.aclose()
        return None

    _client = client
    _last_failure = None
    logger.info("Redis connected")
    return _client


async def close_redis() -> None:
    """Close the shared client and its pool. Called during shutdown."""
    global _client

    if _client is not None:
        await _client.aclose()
        logger.info("Redis connection closed")
    reset_redis_state()


def reset_redis_state() -> None:
    """Forget the client and any recorded failure (tests, shutdown)."""
    global _client, _last_failure, _warned_unconfigured
    _client = None
    _last_failure = None
    _warned_unconfigured = False
