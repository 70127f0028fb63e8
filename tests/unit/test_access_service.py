"""Unit tests for AccessService."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid7

import pytest

from src.workflowkart.services.access_service import AccessService
from tests.factories import PurchaseFactory, WorkflowFactory

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_workflow_repo() -> MagicMock:
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.get_owned = AsyncMock(return_value=None)
    repo.get_public_approved = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def mock_purchase_repo() -> MagicMock:
    repo = MagicMock()
    repo.get_completed = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def access_service(mock_workflow_repo, mock_purchase_repo) -> AccessService:
    return AccessService(mock_workflow_repo, mock_purchase_repo)


class TestHasAccess:
    async def test_owner_has_access(self, access_service, mock_workflow_repo, mock_purchase_repo):
        user_id = uuid7()
        workflow = WorkflowFactory.build(user_id=user_id)
        mock_workflow_repo.get_owned.return_value = workflow

        assert await access_service.has_access(workflow.id, user_id) is True
        mock_purchase_repo.get_completed.assert_not_awaited()

    async def test_completed_purchase_grants_access(self, access_service, mock_purchase_repo):
        workflow_id, buyer_id = uuid7(), uuid7()
        mock_purchase_repo.get_completed.return_value = PurchaseFactory.build(
            workflow_id=workflow_id, buyer_id=buyer_id
        )

        assert await access_service.has_access(workflow_id, buyer_id) is True
        mock_purchase_repo.get_completed.assert_awaited_once_with(workflow_id, buyer_id)

    async def test_public_approved_grants_access(self, access_service, mock_workflow_repo):
        workflow = WorkflowFactory.public_approved(user_id=uuid7())
        mock_workflow_repo.get_public_approved.return_value = workflow

        assert await access_service.has_access(workflow.id, uuid7()) is True

    async def test_no_condition_denies(self, access_service):
        """Nothing matches: plain False, no error."""
        assert await access_service.has_access(uuid7(), uuid7()) is False

    async def test_repeated_calls_agree(self, access_service, mock_purchase_repo):
        workflow_id, user_id = uuid7(), uuid7()
        mock_purchase_repo.get_completed.return_value = PurchaseFactory.build(
            workflow_id=workflow_id, buyer_id=user_id
        )

        first = await access_service.has_access(workflow_id, user_id)
        second = await access_service.has_access(workflow_id, user_id)

        assert first == second is True


class TestGetWorkflow:
    async def test_returns_workflow(self, access_service, mock_workflow_repo):
        workflow = WorkflowFactory.build(user_id=uuid7())
        mock_workflow_repo.get_by_id.return_value = workflow

        assert await access_service.get_workflow(workflow.id) is workflow

    async def test_missing_returns_none(self, access_service):
        assert await access_service.get_workflow(uuid7()) is None
