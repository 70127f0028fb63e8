"""Workflow audit logging - records execution outcomes per workflow and user."""

import contextlib
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.workflowkart.core.logging import get_logger
from src.workflowkart.models import LogLevel, WorkflowLog
from src.workflowkart.repositories import WorkflowLogRepository

logger = get_logger(__name__)


class WorkflowLogService:
    """Service for writing and reading workflow log entries.

    Fire-and-forget design: logging failures should not change the outcome
    of the execution being logged. Runs on its own session so a failed
    write can be rolled back without touching execution records.
    """

    def __init__(self, log_repo: WorkflowLogRepository, session: AsyncSession):
        self.log_repo = log_repo
        self.session = session

    async def append(
        self,
        workflow_id: UUID,
        user_id: UUID,
        level: LogLevel,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> WorkflowLog | None:
        """Append a log entry.

        Failures are logged but do not raise exceptions.

        Args:
            workflow_id: Workflow the entry is about
            user_id: User who triggered the logged event
            level: Entry severity
            message: Human readable summary
            metadata: Structured details (execution id, result, error)

        Returns:
            The created WorkflowLog, or None if writing failed
        """
        try:
            entry = WorkflowLog(
                workflow_id=workflow_id,
                user_id=user_id,
                level=level.value if isinstance(level, LogLevel) else level,
                message=message[:1000],
                log_metadata=metadata,
            )

            self.log_repo.add(entry)
            await self.session.commit()

            logger.debug(
                "Workflow log recorded",
                level=entry.level,
                workflow_id=str(workflow_id),
            )
            return entry

        except Exception as e:
            logger.warning(
                "Failed to record workflow log",
                level=level.value if isinstance(level, LogLevel) else level,
                workflow_id=str(workflow_id),
                error=str(e),
            )
            with contextlib.suppress(Exception):
                await self.session.rollback()
            return None

    async def list_logs(
        self,
        workflow_id: UUID,
        user_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> list[WorkflowLog]:
        """List log entries for a workflow and user, newest first."""
        return await self.log_repo.list_by_workflow_and_user(
            workflow_id=workflow_id,
            user_id=user_id,
            limit=limit,
            offset=offset,
        )
