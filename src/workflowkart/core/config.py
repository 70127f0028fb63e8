from functools import lru_cache

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitPolicy(BaseModel):
    """Sliding window policy: at most `limit` hits per `window_seconds`."""

    limit: int = Field(gt=0)
    window_seconds: int = Field(gt=0)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # App
    app_name: str = "WorkflowKart Runtime"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Auth
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards since credentials are allowed."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Redis (required for execution rate limiting, which fails closed)
    redis_url: str | None = None  # e.g., "redis://localhost:6379/0"
    redis_pool_size: int = 10
    redis_retry_seconds: float = 5.0  # wait after a failed connect before retrying
    rate_limit_prefix: str = "workflowkart:ratelimit"

    # Rate limit policies
    auth_rate_limit: RateLimitPolicy = RateLimitPolicy(limit=5, window_seconds=300)
    upload_rate_limit: RateLimitPolicy = RateLimitPolicy(limit=10, window_seconds=3600)
    checkout_rate_limit: RateLimitPolicy = RateLimitPolicy(limit=20, window_seconds=3600)
    execution_rate_limit: RateLimitPolicy = RateLimitPolicy(limit=100, window_seconds=3600)
    api_rate_limit: RateLimitPolicy = RateLimitPolicy(limit=1000, window_seconds=3600)

    # Runtime
    sandbox_timeout_seconds: float = 30.0
    sandbox_simulated_delay_seconds: float = 1.0
    log_retention_days: int = 90


@lru_cache
def get_settings() -> Settings:
    return Settings()
