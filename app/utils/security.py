"""Security utilities for bearer credentials and share tokens."""

import secrets

from structlog import get_logger

logger = get_logger()

SHARE_TOKEN_BYTES = 24


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    The scheme is matched case-insensitively.

    Args:
        authorization: Raw header value (may be None)

    Returns:
        The token, or None if the header is missing or malformed
    """
    if not authorization:
        return None

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()

    if scheme.lower() != "bearer" or not token:
        logger.warning("authorization_header_malformed", scheme=scheme[:10])
        return None

    return token


def generate_access_token() -> str:
    """Generate an unguessable, URL-safe share-link token."""
    return secrets.token_urlsafe(SHARE_TOKEN_BYTES)
