"""Workflow execution endpoints.

Errors raised by the runtime engine are rendered by the WorkflowKartError
handler: 404 missing workflow, 403 access denied, 429 rate limited, 503 rate
limiter unavailable, 504 sandbox timeout, 500 sandbox failure.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, Request

from src.workflowkart.api.dependencies import CurrentUserId, RuntimeEngineDep
from src.workflowkart.core.config import get_settings
from src.workflowkart.core.rate_limit import limiter, policy_to_limit_string
from src.workflowkart.schemas.execution import (
    ExecuteWorkflowRequest,
    ExecuteWorkflowResponse,
    WorkflowExecutionListResponse,
    WorkflowExecutionRead,
    WorkflowLogListResponse,
    WorkflowLogRead,
)

router = APIRouter(prefix="/workflows", tags=["workflows"])

OffsetQuery = Annotated[int, Query(ge=0, description="Number of items to skip")]


@router.post(
    "/execute",
    response_model=ExecuteWorkflowResponse,
    summary="Execute workflow",
    responses={
        200: {"description": "Execution completed"},
        403: {"description": "Caller may not run this workflow"},
        404: {"description": "Workflow not found"},
        429: {"description": "Execution rate limit exceeded"},
        503: {"description": "Rate limiter unavailable"},
        504: {"description": "Workflow execution timed out"},
    },
)
@limiter.limit(policy_to_limit_string(get_settings().api_rate_limit))
async def execute_workflow(
    request: Request,
    payload: ExecuteWorkflowRequest,
    user_id: CurrentUserId,
    engine: RuntimeEngineDep,
) -> ExecuteWorkflowResponse:
    """Run a workflow as the current user.

    A failed run is still recorded and appears in the execution history.
    """
    execution = await engine.execute_workflow(payload.workflow_id, user_id, payload.input)
    return ExecuteWorkflowResponse(
        success=True,
        data=WorkflowExecutionRead.model_validate(execution),
    )


@router.get(
    "/{workflow_id}/executions",
    response_model=WorkflowExecutionListResponse,
    summary="List executions",
    description="List the current user's executions of a workflow, newest first.",
)
async def list_executions(
    workflow_id: UUID,
    user_id: CurrentUserId,
    engine: RuntimeEngineDep,
    limit: Annotated[int, Query(ge=1, le=100, description="Max items to return")] = 10,
    offset: OffsetQuery = 0,
) -> WorkflowExecutionListResponse:
    executions = await engine.list_executions(workflow_id, user_id, limit=limit, offset=offset)
    return WorkflowExecutionListResponse(
        items=[WorkflowExecutionRead.model_validate(e) for e in executions],
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{workflow_id}/logs",
    response_model=WorkflowLogListResponse,
    summary="List logs",
    description="List workflow log entries written for the current user, newest first.",
)
async def list_logs(
    workflow_id: UUID,
    user_id: CurrentUserId,
    engine: RuntimeEngineDep,
    limit: Annotated[int, Query(ge=1, le=200, description="Max items to return")] = 50,
    offset: OffsetQuery = 0,
) -> WorkflowLogListResponse:
    logs = await engine.list_logs(workflow_id, user_id, limit=limit, offset=offset)
    return WorkflowLogListResponse(
        items=[WorkflowLogRead.model_validate(log) for log in logs],
        limit=limit,
        offset=offset,
    )
