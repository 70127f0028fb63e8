"""Read-only repositories over marketplace workflows and purchases."""

from uuid import UUID

from sqlmodel import select

from src.workflowkart.models import Purchase, PurchaseStatus, Workflow, WorkflowStatus
from src.workflowkart.repositories.base import BaseRepository


class WorkflowRepository(BaseRepository[Workflow]):
    """Repository for Workflow entity."""

    model = Workflow

    async def get_owned(self, workflow_id: UUID, user_id: UUID) -> Workflow | None:
        """Get the workflow only if `user_id` owns it."""
        result = await self.session.execute(
            select(Workflow).where(
                Workflow.id == workflow_id,
                Workflow.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_public_approved(self, workflow_id: UUID) -> Workflow | None:
        """Get the workflow only if it is public and approved."""
        result = await self.session.execute(
            select(Workflow).where(
                Workflow.id == workflow_id,
                Workflow.is_public == True,  # noqa: E712
                Workflow.status == WorkflowStatus.APPROVED.value,
            )
        )
        return result.scalar_one_or_none()


class PurchaseRepository(BaseRepository[Purchase]):
    """Repository for Purchase entity."""

    model = Purchase

    async def get_completed(self, workflow_id: UUID, buyer_id: UUID) -> Purchase | None:
        """Get a completed purchase of the workflow by the buyer, if any."""
        result = await self.session.execute(
            select(Purchase)
            .where(
                Purchase.workflow_id == workflow_id,
                Purchase.buyer_id == buyer_id,
                Purchase.status == PurchaseStatus.COMPLETED.value,
            )
            .limit(1)
        )
        return result.scalars().first()
