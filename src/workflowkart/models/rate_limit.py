"""Per-organization rate limit overrides."""

from datetime import datetime
from uuid import UUID, uuid7

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import Field, SQLModel

from src.workflowkart.models.base import utc_now


class RateLimitRule(SQLModel, table=True):
    """Custom sliding-window budget for one organization on one endpoint."""

    __tablename__ = "rate_limit_rules"
    __table_args__ = (
        UniqueConstraint("organization_id", "endpoint", name="uq_rate_limit_rules_org_endpoint"),
        CheckConstraint('"limit" > 0', name="ck_rate_limit_rules_limit_positive"),
        CheckConstraint("window_seconds > 0", name="ck_rate_limit_rules_window_positive"),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    organization_id: UUID = Field(index=True)
    endpoint: str = Field(max_length=255)
    limit: int = Field(gt=0)
    window_seconds: int = Field(gt=0)
    created_at: datetime = Field(default_factory=utc_now)
