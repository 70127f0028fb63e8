"""Tests for rate limiting (src/workflowkart/core/rate_limit.py).

Tests cover:
- RateLimiterGate: sliding window counting on fakeredis (Lua), fail-closed behavior
- Organization overrides
- get_rate_limit_key / policy_to_limit_string / create_limiter
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid7

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from starlette.requests import Request

from src.workflowkart.core.config import RateLimitPolicy
from src.workflowkart.core.exceptions import RateLimiterUnavailableError, RateLimitExceededError
from src.workflowkart.core.rate_limit import (
    RateLimiterGate,
    create_limiter,
    get_rate_limit_key,
    policy_to_limit_string,
)
from src.workflowkart.models import RateLimitRule

pytestmark = pytest.mark.unit

PREFIX = "test:ratelimit"
# Start of a 60s window: 1_000 windows after the epoch
WINDOW_START_S = 60_000.0


def frozen_at(seconds: float):
    """Pin the limiter clock only; fakeredis keeps real time for key expiry."""
    return patch("src.workflowkart.core.rate_limit._now_ms", return_value=int(seconds * 1000))


@pytest.fixture
def gate(fake_redis) -> RateLimiterGate:
    return RateLimiterGate(redis=fake_redis, prefix=PREFIX)


@pytest.fixture
def small_policy() -> RateLimitPolicy:
    return RateLimitPolicy(limit=3, window_seconds=60)


# --- Sliding window ---


class TestCheckRateLimit:
    async def test_allows_until_limit(self, gate, small_policy):
        results = [await gate.check_rate_limit("execution:u1", small_policy) for _ in range(4)]

        assert [r.success for r in results] == [True, True, True, False]
        assert [r.remaining for r in results] == [2, 1, 0, 0]
        assert all(r.limit == 3 for r in results)

    async def test_identifiers_are_independent(self, gate, small_policy):
        for _ in range(3):
            await gate.check_rate_limit("execution:u1", small_policy)

        result = await gate.check_rate_limit("execution:u2", small_policy)

        assert result.success is True

    async def test_defaults_to_execution_policy(self, gate):
        result = await gate.check_rate_limit("execution:u1")

        assert result.limit == 100
        assert result.remaining == 99

    async def test_reset_is_end_of_current_window(self, gate, small_policy):
        with frozen_at(WINDOW_START_S + 10):
            result = await gate.check_rate_limit("execution:u1", small_policy)

        assert result.reset == (WINDOW_START_S + 60) * 1000

    async def test_rejected_call_is_not_counted(self, gate, fake_redis, small_policy):
        with frozen_at(WINDOW_START_S):
            for _ in range(5):
                await gate.check_rate_limit("execution:u1", small_policy)

        assert await fake_redis.get(f"{PREFIX}:execution:u1:1000") == "3"

    async def test_previous_window_carries_fully_at_window_start(
        self, gate, fake_redis, small_policy
    ):
        await fake_redis.set(f"{PREFIX}:execution:u1:999", 3)

        with frozen_at(WINDOW_START_S):
            result = await gate.check_rate_limit("execution:u1", small_policy)

        assert result.success is False

    async def test_previous_window_decays(self, gate, fake_redis):
        """Halfway through the window only half the previous count remains."""
        policy = RateLimitPolicy(limit=10, window_seconds=60)
        await fake_redis.set(f"{PREFIX}:execution:u1:999", 10)

        with frozen_at(WINDOW_START_S + 30):
            results = [await gate.check_rate_limit("execution:u1", policy) for _ in range(6)]

        assert [r.success for r in results] == [True] * 5 + [False]

    async def test_current_window_key_expires(self, gate, fake_redis, small_policy):
        with frozen_at(WINDOW_START_S):
            await gate.check_rate_limit("execution:u1", small_policy)

        ttl_ms = await fake_redis.pttl(f"{PREFIX}:execution:u1:1000")
        assert 0 < ttl_ms <= 121_000

    async def test_reregisters_script_after_flush(self, gate, fake_redis, small_policy):
        await gate.check_rate_limit("execution:u1", small_policy)
        await fake_redis.script_flush()

        result = await gate.check_rate_limit("execution:u1", small_policy)

        assert result.success is True
        assert result.remaining == 1


# --- Fail closed ---


class TestFailClosed:
    async def test_no_redis_raises_unavailable(self, mock_redis_unavailable, small_policy):
        gate = RateLimiterGate(prefix=PREFIX)

        with pytest.raises(RateLimiterUnavailableError):
            await gate.check_rate_limit("execution:u1", small_policy)

    async def test_redis_error_raises_unavailable(self, small_policy):
        client = MagicMock()
        client.script_load = AsyncMock(side_effect=RedisConnectionError("connection refused"))
        gate = RateLimiterGate(redis=client, prefix=PREFIX)

        with pytest.raises(RateLimiterUnavailableError) as exc:
            await gate.check_rate_limit("execution:u1", small_policy)

        assert isinstance(exc.value.__cause__, RedisConnectionError)

    async def test_unavailable_is_a_rate_limit_rejection(self, mock_redis_unavailable):
        gate = RateLimiterGate(prefix=PREFIX)

        with pytest.raises(RateLimitExceededError):
            await gate.check_rate_limit("execution:u1")

    async def test_uses_shared_client_when_none_injected(self, mock_redis, small_policy):
        gate = RateLimiterGate(prefix=PREFIX)

        result = await gate.check_rate_limit("execution:u1", small_policy)

        assert result.success is True
        assert len(await mock_redis.keys(f"{PREFIX}:execution:u1:*")) == 1


# --- Organization overrides ---


class TestOrganizationRateLimit:
    async def test_stored_rule_overrides_default(self, fake_redis):
        org_id = uuid7()
        rule_repo = MagicMock()
        rule_repo.get_for_endpoint = AsyncMock(
            return_value=RateLimitRule(
                organization_id=org_id, endpoint="/api/export", limit=2, window_seconds=60
            )
        )
        gate = RateLimiterGate(redis=fake_redis, rule_repo=rule_repo, prefix=PREFIX)

        results = [
            await gate.check_organization_rate_limit(org_id, "/api/export") for _ in range(3)
        ]

        assert [r.success for r in results] == [True, True, False]
        rule_repo.get_for_endpoint.assert_awaited_with(org_id, "/api/export")

    @pytest.mark.parametrize("limit,window_seconds", [(5, 0), (0, 60)])
    async def test_invalid_rule_fails_closed(self, fake_redis, limit, window_seconds):
        org_id = uuid7()
        rule_repo = MagicMock()
        rule_repo.get_for_endpoint = AsyncMock(
            return_value=RateLimitRule(
                organization_id=org_id,
                endpoint="/api/export",
                limit=limit,
                window_seconds=window_seconds,
            )
        )
        gate = RateLimiterGate(redis=fake_redis, rule_repo=rule_repo, prefix=PREFIX)

        with pytest.raises(RateLimiterUnavailableError):
            await gate.check_organization_rate_limit(org_id, "/api/export")

        assert await fake_redis.keys(f"{PREFIX}:org:*") == []

    async def test_falls_back_to_api_policy(self, fake_redis):
        rule_repo = MagicMock()
        rule_repo.get_for_endpoint = AsyncMock(return_value=None)
        gate = RateLimiterGate(redis=fake_redis, rule_repo=rule_repo, prefix=PREFIX)

        result = await gate.check_organization_rate_limit(uuid7(), "/api/export")

        assert result.limit == 1000

    async def test_bucket_keyed_by_org_and_endpoint(self, fake_redis):
        org_id = uuid7()
        gate = RateLimiterGate(redis=fake_redis, prefix=PREFIX)

        await gate.check_organization_rate_limit(org_id, "/api/export")

        keys = await fake_redis.keys(f"{PREFIX}:org:{org_id}:/api/export:*")
        assert len(keys) == 1


# --- HTTP limiter helpers ---


@pytest.fixture
def mock_request() -> MagicMock:
    request = MagicMock(spec=Request)
    request.headers = {}
    request.client = MagicMock()
    request.client.host = "192.168.1.100"
    return request


class TestGetRateLimitKey:
    def test_returns_ip(self, mock_request):
        with patch("src.workflowkart.core.rate_limit.get_remote_address", return_value="10.0.0.1"):
            assert get_rate_limit_key(mock_request) == "10.0.0.1"

    def test_returns_unknown_when_ip_not_available(self, mock_request):
        with patch("src.workflowkart.core.rate_limit.get_remote_address", return_value=None):
            assert get_rate_limit_key(mock_request) == "unknown"


def test_policy_to_limit_string():
    policy = RateLimitPolicy(limit=1000, window_seconds=3600)

    assert policy_to_limit_string(policy) == "1000 per 3600 seconds"


def test_limiter_disabled_in_testing():
    assert create_limiter().enabled is False
