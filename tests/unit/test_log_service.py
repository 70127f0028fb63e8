"""Unit tests for WorkflowLogService."""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid7

import pytest

from src.workflowkart.models import LogLevel
from src.workflowkart.services.log_service import WorkflowLogService

pytestmark = pytest.mark.unit


@pytest.fixture
def mock_log_repo() -> MagicMock:
    """Create mock log repository."""
    repo = MagicMock()
    repo.add = MagicMock()
    repo.list_by_workflow_and_user = AsyncMock(return_value=[])
    return repo


@pytest.fixture
def mock_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def log_service(mock_log_repo, mock_session) -> WorkflowLogService:
    return WorkflowLogService(mock_log_repo, mock_session)


class TestAppend:
    async def test_append_creates_entry(self, log_service, mock_log_repo, mock_session):
        workflow_id, user_id = uuid7(), uuid7()

        entry = await log_service.append(
            workflow_id,
            user_id,
            LogLevel.INFO,
            "Workflow executed successfully",
            {"executionId": "abc", "result": {"ok": True}},
        )

        assert entry is not None
        assert entry.workflow_id == workflow_id
        assert entry.user_id == user_id
        assert entry.level == "INFO"
        assert entry.log_metadata == {"executionId": "abc", "result": {"ok": True}}
        mock_log_repo.add.assert_called_once_with(entry)
        mock_session.commit.assert_awaited_once()

    async def test_append_accepts_string_level(self, log_service, mock_log_repo):
        await log_service.append(uuid7(), uuid7(), "WARN", "Slow run")

        assert mock_log_repo.add.call_args[0][0].level == "WARN"

    async def test_append_truncates_long_message(self, log_service, mock_log_repo):
        await log_service.append(uuid7(), uuid7(), LogLevel.ERROR, "x" * 2000)

        assert len(mock_log_repo.add.call_args[0][0].message) == 1000

    async def test_append_fire_and_forget_on_error(self, log_service, mock_session):
        """A failed commit is swallowed and rolled back."""
        mock_session.commit.side_effect = Exception("DB Error")

        result = await log_service.append(uuid7(), uuid7(), LogLevel.ERROR, "failed")

        assert result is None
        mock_session.rollback.assert_awaited_once()

    async def test_append_survives_failed_rollback(self, log_service, mock_session):
        mock_session.commit.side_effect = Exception("DB Error")
        mock_session.rollback.side_effect = Exception("connection lost")

        assert await log_service.append(uuid7(), uuid7(), LogLevel.INFO, "done") is None


class TestListLogs:
    async def test_list_logs_delegates_to_repository(self, log_service, mock_log_repo):
        workflow_id, user_id = uuid7(), uuid7()

        await log_service.list_logs(workflow_id, user_id, limit=20, offset=40)

        mock_log_repo.list_by_workflow_and_user.assert_awaited_once_with(
            workflow_id=workflow_id, user_id=user_id, limit=20, offset=40
        )
