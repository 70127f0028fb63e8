"""FastAPI dependency injection definitions."""

from src.workflowkart.api.dependencies.auth import CurrentUserId, get_current_user_id
from src.workflowkart.api.dependencies.db import (
    DBSession,
    LogDBSession,
    get_db_session,
    get_log_db_session,
)
from src.workflowkart.api.dependencies.services import RuntimeEngineDep, get_runtime_engine

__all__ = [
    # Database
    "DBSession",
    "LogDBSession",
    "get_db_session",
    "get_log_db_session",
    # Auth
    "CurrentUserId",
    "get_current_user_id",
    # Services
    "RuntimeEngineDep",
    "get_runtime_engine",
]
