"""Workflow execution records and their audit log entries."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid7

from sqlalchemy import Column, Index
from sqlmodel import Field, SQLModel

from src.workflowkart.models.base import JSONType, utc_now
from src.workflowkart.models.enums import ExecutionStatus, LogLevel


class WorkflowExecution(SQLModel, table=True):
    """One attempted run of a workflow.

    Created PENDING, moved to RUNNING once the gates pass, and finished in
    exactly one of COMPLETED (result set) or FAILED (error set).
    """

    __tablename__ = "workflow_executions"
    __table_args__ = (
        Index(
            "ix_workflow_executions_workflow_user_started",
            "workflow_id",
            "executed_by_id",
            "started_at",
        ),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    # No FK: runs against unknown workflow ids are recorded as FAILED
    workflow_id: UUID = Field(index=True)
    executed_by_id: UUID = Field(index=True)
    status: str = Field(default=ExecutionStatus.PENDING.value, max_length=20)
    started_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = Field(default=None)
    result: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column(JSONType, nullable=True),
    )
    error: str | None = Field(default=None, max_length=1000)


class WorkflowLog(SQLModel, table=True):
    """Append-only audit entry about a workflow run."""

    __tablename__ = "workflow_logs"
    __table_args__ = (
        Index("ix_workflow_logs_workflow_user_timestamp", "workflow_id", "user_id", "timestamp"),
    )

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    workflow_id: UUID
    user_id: UUID
    level: str = Field(default=LogLevel.INFO.value, max_length=10)
    message: str = Field(max_length=1000)
    # "metadata" is reserved on declarative models, so the attribute is renamed
    log_metadata: dict[str, Any] | None = Field(
        default=None,
        sa_column=Column("metadata", JSONType, nullable=True),
    )
    timestamp: datetime = Field(default_factory=utc_now)
