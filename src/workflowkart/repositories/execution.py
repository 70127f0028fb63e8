"""Repository for WorkflowExecution entity."""

from uuid import UUID

from sqlmodel import select

from src.workflowkart.models import WorkflowExecution
from src.workflowkart.repositories.base import BaseRepository


class WorkflowExecutionRepository(BaseRepository[WorkflowExecution]):
    """Execution record store. Pure persistence, no lifecycle rules."""

    model = WorkflowExecution

    async def list_by_workflow_and_user(
        self,
        workflow_id: UUID,
        user_id: UUID,
        limit: int = 10,
        offset: int = 0,
    ) -> list[WorkflowExecution]:
        """List a user's executions of a workflow, newest first.

        Ties on started_at are broken by id (uuid7, time ordered) so pages
        stay stable.
        """
        query = (
            select(WorkflowExecution)
            .where(
                WorkflowExecution.workflow_id == workflow_id,
                WorkflowExecution.executed_by_id == user_id,
            )
            .order_by(WorkflowExecution.started_at.desc(), WorkflowExecution.id.desc())  # type: ignore[attr-defined]
        )
        return await self.fetch_page(query, limit, offset)
