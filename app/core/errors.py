"""Domain exceptions and service boundary decorator."""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

import aiohttp
import asyncpg
from structlog import get_logger

logger = get_logger()

# Type variables for decorator
P = ParamSpec("P")
T = TypeVar("T")


class DomainError(Exception):
    """Base exception for all domain errors."""

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(DomainError):
    """Bearer credential missing or rejected."""

    code = "UNAUTHORIZED"


class BadRequestError(DomainError):
    """Required input missing or malformed."""

    code = "BAD_REQUEST"


class NotFoundOrForbiddenError(DomainError):
    """Resource absent or owned by someone else.

    Callers cannot tell the two cases apart.
    """

    code = "NOT_FOUND_OR_FORBIDDEN"


class UpstreamError(DomainError):
    """External service (OpenAI, Supabase) returned a non-success response."""

    code = "UPSTREAM_ERROR"

    def __init__(
        self,
        message: str,
        service: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        if service:
            ctx["service"] = service
        super().__init__(message, ctx)


class EmptyTranscriptError(DomainError):
    """Transcription produced no text."""

    code = "EMPTY_TRANSCRIPT"


class PersistenceError(DomainError):
    """Database write or read failed."""

    code = "PERSISTENCE_ERROR"


class ConfigurationError(DomainError):
    """System misconfigured."""

    code = "CONFIGURATION_ERROR"


def service_boundary(func: Callable[P, T]) -> Callable[P, T]:
    """
    Convert native exceptions to domain exceptions at service entry points.

    Usage:
        @service_boundary
        async def process_interview(...):
            await db.execute(...)  # PostgresError -> PersistenceError
            await session.post(...)  # ClientError, timeout -> UpstreamError

    Args:
        func: Async service function to wrap

    Returns:
        Wrapped function that converts exceptions
    """

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except DomainError:
            raise
        except asyncpg.PostgresError as e:
            logger.error("database_error", function=func.__name__, error=str(e))
            raise PersistenceError(str(e), context={"function": func.__name__}) from e
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("external_api_error", function=func.__name__, error=str(e))
            raise UpstreamError(str(e), context={"function": func.__name__}) from e
        except Exception as e:
            logger.exception("unexpected_error", function=func.__name__)
            raise DomainError(
                str(e), context={"function": func.__name__, "type": type(e).__name__}
            ) from e

    return wrapper  # type: ignore[return-value]
