"""Repository for RateLimitRule entity."""

from uuid import UUID

from sqlmodel import select

from src.workflowkart.models import RateLimitRule
from src.workflowkart.repositories.base import BaseRepository


class RateLimitRuleRepository(BaseRepository[RateLimitRule]):
    model = RateLimitRule

    async def get_for_endpoint(self, organization_id: UUID, endpoint: str) -> RateLimitRule | None:
        """Get the organization's override for an endpoint, if one is stored."""
        result = await self.session.execute(
            select(RateLimitRule).where(
                RateLimitRule.organization_id == organization_id,
                RateLimitRule.endpoint == endpoint,
            )
        )
        return result.scalar_one_or_none()
