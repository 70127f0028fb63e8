"""Wiring of RuntimeEngine collaborators, shared by the API and the CLI."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.workflowkart.core.db import get_session
from src.workflowkart.core.rate_limit import RateLimiterGate
from src.workflowkart.repositories import (
    PurchaseRepository,
    WorkflowExecutionRepository,
    WorkflowLogRepository,
    WorkflowRepository,
)
from src.workflowkart.services.access_service import AccessService
from src.workflowkart.services.interfaces import RateLimiter, SandboxRunner
from src.workflowkart.services.log_service import WorkflowLogService
from src.workflowkart.services.runtime_engine import RuntimeEngine
from src.workflowkart.services.sandbox import SimulatedSandboxRunner


@lru_cache
def get_rate_limiter_gate() -> RateLimiterGate:
    """Process-wide gate so the registered script SHA is reused."""
    return RateLimiterGate()


def build_runtime_engine(
    session: AsyncSession,
    log_session: AsyncSession,
    rate_limiter: RateLimiter | None = None,
    sandbox: SandboxRunner | None = None,
) -> RuntimeEngine:
    """Assemble a RuntimeEngine over database sessions.

    Args:
        session: Session for workflow lookups and execution records.
        log_session: Separate session for log entries, so a failed log write
            can roll back without touching execution records.
        rate_limiter: Override for the Redis gate.
        sandbox: Override for the simulated sandbox.
    """
    return RuntimeEngine(
        access_checker=AccessService(WorkflowRepository(session), PurchaseRepository(session)),
        rate_limiter=rate_limiter or get_rate_limiter_gate(),
        execution_store=WorkflowExecutionRepository(session),
        sandbox=sandbox or SimulatedSandboxRunner(),
        log_writer=WorkflowLogService(WorkflowLogRepository(log_session), log_session),
        session=session,
    )


@asynccontextmanager
async def open_runtime_engine(
    engine: AsyncEngine | None = None,
) -> AsyncGenerator[RuntimeEngine]:
    """Open the sessions a RuntimeEngine needs and close them afterwards."""
    async with get_session(engine) as session, get_session(engine) as log_session:
        yield build_runtime_engine(session, log_session)
