"""Collaborator interfaces for the runtime engine.

Each collaborator is injected into RuntimeEngine so it can be replaced
independently (a real sandbox, another rate limit backend, test doubles).
"""

from typing import Any, Protocol
from uuid import UUID

from src.workflowkart.core.config import RateLimitPolicy
from src.workflowkart.core.rate_limit import RateLimitResult
from src.workflowkart.models import LogLevel, Workflow, WorkflowExecution, WorkflowLog


class AccessChecker(Protocol):
    async def get_workflow(self, workflow_id: UUID) -> Workflow | None:
        """Resolve a workflow reference. None when it does not exist."""
        ...

    async def has_access(self, workflow_id: UUID, user_id: UUID) -> bool:
        """Whether the user may run the workflow. Never raises for missing rows."""
        ...


class RateLimiter(Protocol):
    async def check_rate_limit(
        self, identifier: str, policy: RateLimitPolicy | None = None
    ) -> RateLimitResult:
        """Count one hit. Raises when the backend cannot decide (fail closed)."""
        ...


class ExecutionRecordStore(Protocol):
    async def create(self, entity: WorkflowExecution) -> WorkflowExecution: ...

    async def update(self, id: UUID, **fields: Any) -> WorkflowExecution | None: ...

    async def list_by_workflow_and_user(
        self, workflow_id: UUID, user_id: UUID, limit: int = 10, offset: int = 0
    ) -> list[WorkflowExecution]: ...


class SandboxRunner(Protocol):
    async def run(self, workflow_file_ref: str, input: dict[str, Any] | None) -> dict[str, Any]:
        """Run a workflow file and return its result payload, or raise."""
        ...


class LogWriter(Protocol):
    async def append(
        self,
        workflow_id: UUID,
        user_id: UUID,
        level: LogLevel,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> WorkflowLog | None:
        """Append an audit entry. Best effort: returns None instead of raising."""
        ...

    async def list_logs(
        self, workflow_id: UUID, user_id: UUID, limit: int = 50, offset: int = 0
    ) -> list[WorkflowLog]: ...
