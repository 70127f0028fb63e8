from src.workflowkart.services.access_service import AccessService
from src.workflowkart.services.log_service import WorkflowLogService
from src.workflowkart.services.runtime_engine import (
    Completed,
    ExecutionOutcome,
    Failed,
    RuntimeEngine,
)
from src.workflowkart.services.sandbox import SimulatedSandboxRunner

__all__ = [
    "AccessService",
    "Completed",
    "ExecutionOutcome",
    "Failed",
    "RuntimeEngine",
    "SimulatedSandboxRunner",
    "WorkflowLogService",
]
