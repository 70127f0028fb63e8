"""Runtime engine - orchestrates one workflow execution from request to record.

Every invocation creates exactly one WorkflowExecution and drives it through

    PENDING -> RUNNING -> COMPLETED
    PENDING -> FAILED            (workflow missing, access denied, rate limited)
    RUNNING -> FAILED            (sandbox raised, or its result could not be stored)

Failures are recorded on the execution and in an ERROR log entry before the
original error is re-raised to the caller. Nothing is retried here.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.workflowkart.core.exceptions import (
    AccessDeniedError,
    InvalidTransitionError,
    RateLimitExceededError,
    WorkflowKartError,
    WorkflowNotFoundError,
)
from src.workflowkart.core.logging import bind_execution_context, get_logger
from src.workflowkart.models import (
    EXECUTION_TRANSITIONS,
    ExecutionStatus,
    LogLevel,
    Workflow,
    WorkflowExecution,
    WorkflowLog,
)
from src.workflowkart.models.base import utc_now
from src.workflowkart.services.interfaces import (
    AccessChecker,
    ExecutionRecordStore,
    LogWriter,
    RateLimiter,
    SandboxRunner,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Completed:
    result: dict[str, Any]


@dataclass(frozen=True)
class Failed:
    error: Exception

    @property
    def message(self) -> str:
        return error_message(self.error)


ExecutionOutcome = Completed | Failed


def error_message(error: Exception) -> str:
    """Message stored on a FAILED record for `error`."""
    if isinstance(error, WorkflowKartError):
        return error.message
    return str(error) or "Unknown error"


class RuntimeEngine:
    """Runs workflows on behalf of users and keeps their execution history."""

    def __init__(
        self,
        access_checker: AccessChecker,
        rate_limiter: RateLimiter,
        execution_store: ExecutionRecordStore,
        sandbox: SandboxRunner,
        log_writer: LogWriter,
        session: AsyncSession,
    ):
        self.access_checker = access_checker
        self.rate_limiter = rate_limiter
        self.execution_store = execution_store
        self.sandbox = sandbox
        self.log_writer = log_writer
        self.session = session

    async def execute_workflow(
        self,
        workflow_id: UUID,
        user_id: UUID,
        input: dict[str, Any] | None = None,
    ) -> WorkflowExecution:
        """Run a workflow and return its COMPLETED execution record.

        Raises:
            WorkflowNotFoundError, AccessDeniedError, RateLimitExceededError,
            SandboxExecutionError: after the FAILED record and ERROR log entry
            have been written. Unexpected errors are recorded the same way
            and re-raised unchanged.
        """
        execution, outcome = await self.run(workflow_id, user_id, input)
        if isinstance(outcome, Failed):
            raise outcome.error
        return execution

    async def run(
        self,
        workflow_id: UUID,
        user_id: UUID,
        input: dict[str, Any] | None = None,
    ) -> tuple[WorkflowExecution, ExecutionOutcome]:
        """Run a workflow and return the terminal record with its outcome.

        Unlike execute_workflow, a failed run is returned, not raised.
        """
        execution = await self.execution_store.create(
            WorkflowExecution(
                workflow_id=workflow_id,
                executed_by_id=user_id,
                status=ExecutionStatus.PENDING.value,
            )
        )
        await self.session.commit()
        execution_id = execution.id

        bind_execution_context(execution_id, workflow_id)
        logger.info("Workflow execution started", user_id=str(user_id))

        status = ExecutionStatus.PENDING
        outcome: ExecutionOutcome
        try:
            workflow = await self._admit(workflow_id, user_id)
        except Exception as e:
            outcome = Failed(e)
        else:
            try:
                execution = await self._transition(
                    execution_id, status, ExecutionStatus.RUNNING
                )
            except Exception as e:
                outcome = Failed(e)
            else:
                status = ExecutionStatus.RUNNING
                outcome = await self._run_sandbox(workflow, input)

        if isinstance(outcome, Failed) and isinstance(outcome.error, SQLAlchemyError):
            # The session is unusable until the failed transaction is discarded
            await self.session.rollback()

        try:
            execution = await self._finish(execution_id, status, outcome)
        except Exception as e:
            if isinstance(outcome, Failed):
                raise
            # The result could not be stored (e.g. not JSON serializable)
            logger.error("Could not store execution result", error=str(e))
            await self.session.rollback()
            outcome = Failed(e)
            execution = await self._finish(execution_id, status, outcome)

        await self._write_log(execution, workflow_id, user_id, outcome)
        return execution, outcome

    async def _admit(self, workflow_id: UUID, user_id: UUID) -> Workflow:
        """Run the PENDING gates in order: existence, access, rate limit."""
        workflow = await self.access_checker.get_workflow(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError()

        if not await self.access_checker.has_access(workflow_id, user_id):
            raise AccessDeniedError()

        rate_limit = await self.rate_limiter.check_rate_limit(f"execution:{user_id}")
        if not rate_limit.success:
            raise RateLimitExceededError(reset=rate_limit.reset)

        return workflow

    async def _run_sandbox(
        self, workflow: Workflow, input: dict[str, Any] | None
    ) -> ExecutionOutcome:
        try:
            result = await self.sandbox.run(workflow.file_url, input)
        except Exception as e:
            return Failed(e)
        return Completed(result)

    async def _transition(
        self,
        execution_id: UUID,
        current: ExecutionStatus,
        target: ExecutionStatus,
        **fields: Any,
    ) -> WorkflowExecution:
        if current.is_terminal:
            raise InvalidTransitionError(
                f"Execution {execution_id} is already {current.value}"
            )
        if target not in EXECUTION_TRANSITIONS[current]:
            raise InvalidTransitionError(
                f"Execution {execution_id} cannot move from {current.value} to {target.value}"
            )

        execution = await self.execution_store.update(
            execution_id, status=target.value, **fields
        )
        if execution is None:
            raise InvalidTransitionError(f"Execution {execution_id} no longer exists")
        await self.session.commit()
        return execution

    async def _finish(
        self,
        execution_id: UUID,
        current: ExecutionStatus,
        outcome: ExecutionOutcome,
    ) -> WorkflowExecution:
        if isinstance(outcome, Completed):
            execution = await self._transition(
                execution_id,
                current,
                ExecutionStatus.COMPLETED,
                completed_at=utc_now(),
                result=outcome.result,
                error=None,
            )
            logger.info("Workflow execution completed")
        else:
            execution = await self._transition(
                execution_id,
                current,
                ExecutionStatus.FAILED,
                completed_at=utc_now(),
                result=None,
                error=outcome.message[:1000],
            )
            logger.warning(
                "Workflow execution failed",
                failed_from=current.value,
                error_type=type(outcome.error).__name__,
                error=outcome.message,
            )
        return execution

    async def _write_log(
        self,
        execution: WorkflowExecution,
        workflow_id: UUID,
        user_id: UUID,
        outcome: ExecutionOutcome,
    ) -> None:
        if isinstance(outcome, Completed):
            await self.log_writer.append(
                workflow_id,
                user_id,
                LogLevel.INFO,
                "Workflow executed successfully",
                {"executionId": str(execution.id), "result": outcome.result},
            )
        else:
            await self.log_writer.append(
                workflow_id,
                user_id,
                LogLevel.ERROR,
                "Workflow execution failed",
                {"executionId": str(execution.id), "error": outcome.message},
            )

    async def list_executions(
        self,
        workflow_id: UUID,
        user_id: UUID,
        limit: int = 10,
        offset: int = 0,
    ) -> list[WorkflowExecution]:
        """A user's executions of a workflow, newest first."""
        return await self.execution_store.list_by_workflow_and_user(
            workflow_id, user_id, limit=limit, offset=offset
        )

    async def list_logs(
        self,
        workflow_id: UUID,
        user_id: UUID,
        limit: int = 50,
        offset: int = 0,
    ) -> list[WorkflowLog]:
        """Log entries for a workflow and user, newest first."""
        return await self.log_writer.list_logs(workflow_id, user_id, limit=limit, offset=offset)
