"""Rate limiting for the processing and upload endpoints."""

import hashlib

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from structlog import get_logger

from app.api.errors import error_body
from app.utils.security import extract_bearer_token

logger = get_logger()


def rate_limit_key(request: Request) -> str:
    """
    Bucket per bearer credential, or per client address for anonymous calls.

    Tokens are hashed so raw credentials never sit in limiter storage.
    """
    token = extract_bearer_token(request.headers.get("authorization"))
    if token:
        return "token:" + hashlib.sha256(token.encode()).hexdigest()[:32]
    return "addr:" + get_remote_address(request)


def get_limiter() -> Limiter:
    """Create a limiter keyed by ``rate_limit_key``."""
    return Limiter(key_func=rate_limit_key)


# Shared by route decorators and app.state
limiter = get_limiter()


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render 429 in the same flat failure body as every other error."""
    logger.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(request, "RATE_LIMITED", f"Rate limit exceeded: {exc.detail}"),
    )


def setup_rate_limiting(app: FastAPI) -> Limiter:
    """
    Attach the shared limiter to the application.

    Returns:
        Limiter instance for use in route decorators
    """
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    return limiter
