"""Bearer credential verification."""

from __future__ import annotations

from dataclasses import dataclass

from structlog import get_logger

from app.clients.supabase import supabase_client
from app.core.errors import UnauthorizedError, service_boundary
from app.utils.security import extract_bearer_token

logger = get_logger()


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity resolved from a verified bearer token."""

    id: str
    access_token: str
    email: str | None = None


@service_boundary
async def authenticate(authorization: str | None) -> AuthenticatedUser:
    """
    Resolve the ``Authorization`` header to a user.

    Args:
        authorization: Raw header value

    Returns:
        The authenticated user

    Raises:
        UnauthorizedError: If the header is missing/malformed or the token is rejected
        UpstreamError: If the auth service is unavailable
    """
    if not authorization:
        raise UnauthorizedError("Missing authorization header")

    token = extract_bearer_token(authorization)
    if not token:
        raise UnauthorizedError("Invalid authorization")

    user = await supabase_client.get_user(token)
    if not user:
        raise UnauthorizedError("Invalid authorization")

    logger.debug("request_authenticated", user_id=user["id"])
    return AuthenticatedUser(id=user["id"], access_token=token, email=user.get("email"))
