"""Test helper functions for common data creation patterns."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.workflowkart.core.security import create_access_token
from src.workflowkart.models import Purchase, User, Workflow
from tests.factories import PurchaseFactory, UserFactory, WorkflowFactory


async def create_user(session: AsyncSession, **user_kwargs) -> User:
    """Create and commit a user."""
    user = UserFactory.build(**user_kwargs)
    session.add(user)
    await session.commit()
    return user


async def create_workflow(
    session: AsyncSession,
    owner: User,
    public_approved: bool = False,
    **workflow_kwargs,
) -> Workflow:
    """Create and commit a workflow owned by `owner`."""
    if public_approved:
        workflow = WorkflowFactory.public_approved(user_id=owner.id, **workflow_kwargs)
    else:
        workflow = WorkflowFactory.build(user_id=owner.id, **workflow_kwargs)
    session.add(workflow)
    await session.commit()
    return workflow


async def create_purchase(
    session: AsyncSession,
    workflow: Workflow,
    buyer: User,
    completed: bool = True,
) -> Purchase:
    """Create and commit a purchase of `workflow` by `buyer`."""
    if completed:
        purchase = PurchaseFactory.build(workflow_id=workflow.id, buyer_id=buyer.id)
    else:
        purchase = PurchaseFactory.pending(workflow_id=workflow.id, buyer_id=buyer.id)
    session.add(purchase)
    await session.commit()
    return purchase


def auth_headers(user: User) -> dict[str, str]:
    """Bearer authorization header for `user`."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
