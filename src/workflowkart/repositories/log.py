"""Repository for WorkflowLog entity."""

from datetime import timedelta
from typing import Any, cast
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.engine import CursorResult
from sqlmodel import select

from src.workflowkart.models import WorkflowLog
from src.workflowkart.models.base import utc_now
from src.workflowkart.repositories.base import BaseRepository


class WorkflowLogRepository(BaseRepository[WorkflowLog]):
    """Repository for append-only workflow audit entries."""

    model = WorkflowLog

    async def list_by_workflow_and_user(
        self,
        workflow_id: UUID,
        user_id: UUID,
        limit: int = 50,
        offset: int = 0,
        level: str | None = None,
    ) -> list[WorkflowLog]:
        """List log entries for a workflow and user, newest first.

        Args:
            workflow_id: Workflow to filter by
            user_id: User the entries were written for
            limit: Maximum items to return
            offset: Number of items to skip
            level: Optional level filter (e.g. "ERROR")
        """
        query = select(WorkflowLog).where(
            WorkflowLog.workflow_id == workflow_id,
            WorkflowLog.user_id == user_id,
        )
        if level:
            query = query.where(WorkflowLog.level == level)

        query = query.order_by(WorkflowLog.timestamp.desc(), WorkflowLog.id.desc())  # type: ignore[attr-defined]
        return await self.fetch_page(query, limit, offset)

    async def cleanup_old_logs(self, retention_days: int) -> int:
        """Delete log entries older than retention_days.

        Returns:
            Number of entries deleted
        """
        cutoff = utc_now() - timedelta(days=retention_days)
        stmt = delete(WorkflowLog).where(WorkflowLog.timestamp < cutoff)  # type: ignore[arg-type]
        result = await self.session.execute(stmt)
        await self.session.commit()
        return cast(CursorResult[Any], result).rowcount or 0
