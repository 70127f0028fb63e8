from src.workflowkart.schemas.execution import (
    ExecuteWorkflowRequest,
    ExecuteWorkflowResponse,
    WorkflowExecutionListResponse,
    WorkflowExecutionRead,
    WorkflowLogListResponse,
    WorkflowLogRead,
)

__all__ = [
    "ExecuteWorkflowRequest",
    "ExecuteWorkflowResponse",
    "WorkflowExecutionListResponse",
    "WorkflowExecutionRead",
    "WorkflowLogListResponse",
    "WorkflowLogRead",
]
