"""Shared FastAPI dependencies."""

from fastapi import Header

from app.services.auth import AuthenticatedUser, authenticate


async def get_current_user(authorization: str | None = Header(default=None)) -> AuthenticatedUser:
    """Resolve the bearer credential; raises UnauthorizedError (401) on failure."""
    return await authenticate(authorization)
