"""Marketplace workflow and purchase models.

Both tables belong to the marketplace; the runtime only reads them to decide
whether a caller may run a workflow.
"""

from datetime import datetime
from uuid import UUID, uuid7

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from src.workflowkart.models.base import utc_now
from src.workflowkart.models.enums import PurchaseStatus, WorkflowStatus


class Workflow(SQLModel, table=True):
    """An uploaded automation workflow file listed on the marketplace."""

    __tablename__ = "workflows"

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    name: str = Field(max_length=200)
    user_id: UUID = Field(foreign_key="users.id", index=True)  # owner
    file_url: str = Field(max_length=2048)
    is_public: bool = Field(default=False)
    status: str = Field(default=WorkflowStatus.PENDING.value, max_length=20)
    created_at: datetime = Field(default_factory=utc_now)


class Purchase(SQLModel, table=True):
    """A buyer's purchase of a workflow."""

    __tablename__ = "purchases"
    __table_args__ = (Index("ix_purchases_workflow_buyer", "workflow_id", "buyer_id"),)

    id: UUID = Field(default_factory=uuid7, primary_key=True)
    workflow_id: UUID = Field(foreign_key="workflows.id")
    buyer_id: UUID = Field(foreign_key="users.id", index=True)
    status: str = Field(default=PurchaseStatus.PENDING.value, max_length=20)
    created_at: datetime = Field(default_factory=utc_now)
