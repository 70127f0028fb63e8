"""Model exports.

Import from here: `from src.workflowkart.models import WorkflowExecution`
"""

from src.workflowkart.models.enums import (
    EXECUTION_TRANSITIONS,
    ExecutionStatus,
    LogLevel,
    PurchaseStatus,
    WorkflowStatus,
)
from src.workflowkart.models.execution import WorkflowExecution, WorkflowLog
from src.workflowkart.models.rate_limit import RateLimitRule
from src.workflowkart.models.user import User
from src.workflowkart.models.workflow import Purchase, Workflow

__all__ = [
    # Enums
    "EXECUTION_TRANSITIONS",
    "ExecutionStatus",
    "LogLevel",
    "PurchaseStatus",
    "WorkflowStatus",
    # Models
    "Purchase",
    "RateLimitRule",
    "User",
    "Workflow",
    "WorkflowExecution",
    "WorkflowLog",
]
