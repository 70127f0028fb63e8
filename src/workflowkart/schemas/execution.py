"""Execution and log schemas for API requests and responses."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ExecuteWorkflowRequest(BaseModel):
    """Schema for starting a workflow execution."""

    model_config = ConfigDict(populate_by_name=True)

    workflow_id: UUID = Field(validation_alias=AliasChoices("workflow_id", "workflowId"))
    input: dict[str, Any] | None = Field(
        default=None,
        description="Arbitrary JSON object passed to the workflow.",
    )


class WorkflowExecutionRead(BaseModel):
    """Execution record for API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workflow_id: UUID
    executed_by_id: UUID
    status: str
    started_at: datetime
    completed_at: datetime | None
    result: dict[str, Any] | None
    error: str | None


class ExecuteWorkflowResponse(BaseModel):
    success: bool = True
    data: WorkflowExecutionRead


class WorkflowExecutionListResponse(BaseModel):
    """Offset-paginated execution history."""

    items: list[WorkflowExecutionRead]
    limit: int
    offset: int


class WorkflowLogRead(BaseModel):
    """Log entry for API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    workflow_id: UUID
    user_id: UUID
    level: str
    message: str
    metadata: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("log_metadata", "metadata"),
    )
    timestamp: datetime


class WorkflowLogListResponse(BaseModel):
    """Offset-paginated log entries."""

    items: list[WorkflowLogRead]
    limit: int
    offset: int
