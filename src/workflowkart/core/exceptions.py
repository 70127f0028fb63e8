"""Domain errors and the exception handlers that render them with request_id."""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.workflowkart.core.logging import get_logger

logger = get_logger(__name__)


class WorkflowKartError(Exception):
    """Base class for errors raised by the execution runtime."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WorkflowNotFoundError(WorkflowKartError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Workflow not found"):
        super().__init__(message)


class AccessDeniedError(WorkflowKartError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied to workflow"):
        super().__init__(message)


class RateLimitExceededError(WorkflowKartError):
    """The sliding-window gate rejected the call."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS

    def __init__(self, message: str = "Execution rate limit exceeded", reset: int | None = None):
        super().__init__(message)
        self.reset = reset


class RateLimiterUnavailableError(RateLimitExceededError):
    """Rate limit backend missing or failing. Treated as a rejection (fail closed)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Execution rate limiter unavailable"):
        super().__init__(message)


class SandboxExecutionError(WorkflowKartError):
    """The sandbox failed while running a workflow."""


class SandboxTimeoutError(SandboxExecutionError):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT


class InvalidTransitionError(WorkflowKartError):
    """An execution record was asked to leave a state it cannot leave."""


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(WorkflowKartError)
    async def workflowkart_exception_handler(
        request: Request, exc: WorkflowKartError
    ) -> JSONResponse:
        headers = None
        if isinstance(exc, RateLimitExceededError) and exc.reset is not None:
            headers = {"X-RateLimit-Reset": str(exc.reset)}
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.message,
                "request_id": correlation_id.get(),
            },
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
