"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.workflowkart.api.dependencies.db import DBSession, LogDBSession
from src.workflowkart.services.factory import build_runtime_engine
from src.workflowkart.services.runtime_engine import RuntimeEngine


def get_runtime_engine(session: DBSession, log_session: LogDBSession) -> RuntimeEngine:
    """Get runtime engine with request-scoped sessions."""
    return build_runtime_engine(session, log_session)


RuntimeEngineDep = Annotated[RuntimeEngine, Depends(get_runtime_engine)]
