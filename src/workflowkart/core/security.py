"""Bearer tokens identifying the user behind a runtime request.

Tokens are issued by the marketplace's auth service; this module only needs
to read them. ``create_access_token`` exists for local tooling and tests.
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from jose import JWTError, jwt

from src.workflowkart.core.config import get_settings

ACCESS_TOKEN_TYPE = "access"


class InvalidTokenError(Exception):
    """The token cannot identify a user. ``str(e)`` is safe to return to clients."""


def create_access_token(user_id: UUID, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "exp": datetime.now(UTC) + lifetime,
    }
    token: str = jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    return token


def read_access_token(token: str) -> UUID:
    """Verify ``token`` and return the user id in its subject claim.

    Raises:
        InvalidTokenError: bad signature, expired, not an access token, or the
            subject is not a UUID.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidTokenError("Invalid or expired token") from e

    if claims.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidTokenError("Invalid token type")

    try:
        return UUID(claims.get("sub") or "")
    except ValueError as e:
        raise InvalidTokenError("Invalid user_id in token") from e
