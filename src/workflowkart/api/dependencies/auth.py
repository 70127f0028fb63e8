"""Caller identification for the runtime endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.workflowkart.api.dependencies.db import DBSession
from src.workflowkart.core.logging import bind_user_context
from src.workflowkart.core.security import InvalidTokenError, read_access_token
from src.workflowkart.models import User

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    session: DBSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> UUID:
    """Resolve the bearer token to an existing user's id."""
    if credentials is None:
        raise _unauthorized("Missing or invalid authorization header")

    try:
        user_id = read_access_token(credentials.credentials)
    except InvalidTokenError as e:
        raise _unauthorized(str(e)) from e

    if await session.get(User, user_id) is None:
        raise _unauthorized("User not found")

    bind_user_context(user_id)
    return user_id


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
