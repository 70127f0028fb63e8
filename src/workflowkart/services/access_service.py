"""Decides who may run a workflow."""

from uuid import UUID

from src.workflowkart.models import Workflow
from src.workflowkart.repositories import PurchaseRepository, WorkflowRepository


class AccessService:
    """Access predicate over ownership, purchases and public listings.

    Read-only: the result depends only on the stored workflow and purchase
    rows, so repeated calls over unchanged data agree.
    """

    def __init__(
        self,
        workflow_repo: WorkflowRepository,
        purchase_repo: PurchaseRepository,
    ):
        self.workflow_repo = workflow_repo
        self.purchase_repo = purchase_repo

    async def get_workflow(self, workflow_id: UUID) -> Workflow | None:
        return await self.workflow_repo.get_by_id(workflow_id)

    async def has_access(self, workflow_id: UUID, user_id: UUID) -> bool:
        """Grant access to the owner, a completed purchaser, or anyone when
        the workflow is public and approved.
        """
        if await self.workflow_repo.get_owned(workflow_id, user_id) is not None:
            return True

        if await self.purchase_repo.get_completed(workflow_id, user_id) is not None:
            return True

        return await self.workflow_repo.get_public_approved(workflow_id) is not None
