"""Rate limiting backed by Redis.

Provides two layers:
1. RateLimiterGate: sliding-window counters for business actions (workflow
   executions, organization endpoints). Fails closed: if Redis is missing or
   errors, the check raises instead of allowing the call.
2. slowapi limiter: per-IP request throttling on HTTP endpoints.
"""

import time
from dataclasses import dataclass
from uuid import UUID

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import NoScriptError
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from src.workflowkart.core.config import RateLimitPolicy, get_settings
from src.workflowkart.core.exceptions import RateLimiterUnavailableError
from src.workflowkart.core.logging import get_logger
from src.workflowkart.core.redis import get_redis
from src.workflowkart.repositories.rate_limit_rule import RateLimitRuleRepository

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


# Weighted sliding window: the previous window's count decays linearly as the
# current window elapses. Runs atomically on the Redis server.
# Returns {allowed (0|1), weighted_count_after_call}.
_SLIDING_WINDOW_SCRIPT = """
local current_key = KEYS[1]
local previous_key = KEYS[2]
local limit = tonumber(ARGV[1])
local now = tonumber(ARGV[2])
local window = tonumber(ARGV[3])

local current = tonumber(redis.call('GET', current_key) or '0')
local previous = tonumber(redis.call('GET', previous_key) or '0')
local carried = math.floor(previous * (1 - (now % window) / window))

if carried + current >= limit then
    return {0, carried + current}
end

current = redis.call('INCR', current_key)
if current == 1 then
    redis.call('PEXPIRE', current_key, window * 2 + 1000)
end
return {1, carried + current}
"""


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one rate limit check. `reset` is epoch milliseconds."""

    success: bool
    limit: int
    remaining: int
    reset: int


class RateLimiterGate:
    """Sliding-window rate limiter over Redis.

    Holds no counter state of its own; every decision is made by the Lua
    script on the Redis server, so concurrent callers across processes see
    the same counts.
    """

    def __init__(
        self,
        redis: Redis | None = None,
        rule_repo: RateLimitRuleRepository | None = None,
        prefix: str | None = None,
    ):
        self._redis = redis
        self.rule_repo = rule_repo
        self.prefix = prefix or get_settings().rate_limit_prefix
        self._script_sha: str | None = None

    async def _get_client(self) -> Redis:
        client = self._redis if self._redis is not None else await get_redis()
        if client is None:
            logger.error("Rate limit check refused: Redis unavailable")
            raise RateLimiterUnavailableError()
        return client

    async def _eval(self, client: Redis, keys: list[str], args: list[int]) -> list[int]:
        if self._script_sha is None:
            self._script_sha = await client.script_load(_SLIDING_WINDOW_SCRIPT)
        try:
            return await client.evalsha(self._script_sha, len(keys), *keys, *args)  # type: ignore[no-any-return]
        except NoScriptError:
            # Script cache flushed (e.g. Redis restarted): register again once
            self._script_sha = await client.script_load(_SLIDING_WINDOW_SCRIPT)
            return await client.evalsha(self._script_sha, len(keys), *keys, *args)  # type: ignore[no-any-return]

    async def check_rate_limit(
        self, identifier: str, policy: RateLimitPolicy | None = None
    ) -> RateLimitResult:
        """Count one hit against `identifier` and report whether it is allowed.

        Args:
            identifier: Bucket key, e.g. "execution:<user_id>"
            policy: Limit and window. Defaults to the execution policy.

        Raises:
            RateLimiterUnavailableError: Redis missing or the script call failed.
        """
        if policy is None:
            policy = get_settings().execution_rate_limit

        client = await self._get_client()

        now_ms = _now_ms()
        window_ms = policy.window_seconds * 1000
        current_window = now_ms // window_ms
        base = f"{self.prefix}:{identifier}"
        keys = [f"{base}:{current_window}", f"{base}:{current_window - 1}"]

        try:
            allowed, used = await self._eval(client, keys, [policy.limit, now_ms, window_ms])
        except Exception as e:
            self._script_sha = None
            logger.error(
                "Rate limit check failed, refusing call",
                identifier=identifier,
                error=str(e),
            )
            raise RateLimiterUnavailableError() from e

        result = RateLimitResult(
            success=bool(allowed),
            limit=policy.limit,
            remaining=max(0, policy.limit - int(used)),
            reset=(current_window + 1) * window_ms,
        )
        if not result.success:
            logger.warning(
                "Rate limit exceeded",
                identifier=identifier,
                limit=policy.limit,
                window_seconds=policy.window_seconds,
            )
        return result

    async def check_organization_rate_limit(
        self, organization_id: UUID, endpoint: str
    ) -> RateLimitResult:
        """Check an organization's budget for an endpoint.

        Uses the organization's stored rule when one exists, otherwise the
        default API policy. A stored rule with a non-positive limit or window
        is refused like an unavailable backend.
        """
        policy = get_settings().api_rate_limit
        if self.rule_repo is not None:
            rule = await self.rule_repo.get_for_endpoint(organization_id, endpoint)
            if rule is not None:
                try:
                    policy = RateLimitPolicy(
                        limit=rule.limit, window_seconds=rule.window_seconds
                    )
                except ValidationError as e:
                    logger.error(
                        "Invalid rate limit rule, refusing call",
                        rule_id=str(rule.id),
                        limit=rule.limit,
                        window_seconds=rule.window_seconds,
                    )
                    raise RateLimiterUnavailableError() from e

        return await self.check_rate_limit(f"org:{organization_id}:{endpoint}", policy)


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key for HTTP throttling: client IP only.

    Never include user-controlled headers here; rotating them would mint
    unlimited fresh buckets.
    """
    return get_remote_address(request) or "unknown"


def policy_to_limit_string(policy: RateLimitPolicy) -> str:
    """Render a policy in the `limits` notation, e.g. "1000 per 3600 seconds"."""
    return f"{policy.limit} per {policy.window_seconds} seconds"


def create_limiter() -> Limiter:
    """Create the HTTP request limiter. Disabled in the testing environment."""
    settings = get_settings()

    if settings.app_env == "testing":
        logger.info("Request limiter disabled (testing environment)")
        return Limiter(key_func=get_rate_limit_key, enabled=False)

    default_limits = [policy_to_limit_string(settings.api_rate_limit)]
    if settings.redis_url:
        logger.info("Request limiter using Redis backend")
        return Limiter(
            key_func=get_rate_limit_key,
            default_limits=default_limits,
            storage_uri=settings.redis_url,
        )
    logger.info("Request limiter using in-memory backend (not distributed)")
    return Limiter(key_func=get_rate_limit_key, default_limits=default_limits)


# Reads settings at import time; reconfiguration needs a restart
limiter = create_limiter()
