"""FastAPI exception handlers for domain errors."""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from structlog import get_logger

from app.core.config import settings
from app.core.errors import DomainError

logger = get_logger()

# Map domain error codes to HTTP status codes
ERROR_STATUS_MAP = {
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "BAD_REQUEST": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND_OR_FORBIDDEN": status.HTTP_404_NOT_FOUND,
    "UPSTREAM_ERROR": status.HTTP_502_BAD_GATEWAY,
    "EMPTY_TRANSCRIPT": status.HTTP_502_BAD_GATEWAY,
    "PERSISTENCE_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "CONFIGURATION_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "DOMAIN_ERROR": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# The browser-facing handlers answer every failure with a 5xx; the taxonomy
# stays in the body code
HANDLER_PATHS = frozenset({"/transcribe-audio", "/process-interview"})


def status_for(request: Request, http_status: int) -> int:
    """Raise client-error statuses to 500 on the handler paths."""
    if request.url.path in HANDLER_PATHS and http_status < 500:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return http_status


def error_body(request: Request, code: str, message: str) -> dict[str, Any]:
    """Flat failure body shared by every handler: success=false plus the message."""
    return {
        "success": False,
        "error": message,
        "code": code,
        "request_id": getattr(request.state, "request_id", None),
    }


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """
    Handle domain-level exceptions and translate to HTTP responses.

    Domain errors are expected/handled errors, so log at WARNING level.
    Includes error context in response if expose_error_details is enabled.

    Args:
        request: FastAPI request
        exc: Domain exception

    Returns:
        JSON error response with appropriate status code
    """
    http_status = status_for(
        request, ERROR_STATUS_MAP.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    )

    logger.warning(
        "domain_error_handled",
        error_code=exc.code,
        http_status=http_status,
        message=exc.message,
        context=exc.context,
        path=request.url.path,
    )

    content = error_body(request, exc.code, exc.message)

    # Development/staging only
    if settings.expose_error_details and exc.context:
        content["details"] = exc.context

    return JSONResponse(status_code=http_status, content=content)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render HTTPException in the flat failure format."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(request, f"HTTP_{exc.status_code}", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Malformed bodies and query/form parameters are a BadRequest (500 on the
    handler paths).

    Pydantic's error list is attached as ``details`` when enabled.
    """
    content = error_body(request, "BAD_REQUEST", "Invalid request data")
    if settings.expose_error_details:
        content["details"] = jsonable_errors(exc)

    logger.warning("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status_for(request, status.HTTP_400_BAD_REQUEST), content=content
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    # ctx may hold exception instances that JSONResponse cannot encode
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions and return standardized error format.

    Logs the full exception with stack trace for debugging.
    """
    logger.exception(
        "unhandled_exception",
        error_type=type(exc).__name__,
        path=request.url.path,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(request, "INTERNAL_ERROR", "An unexpected error occurred"),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Configure exception handlers for the application.

    Registers handlers for:
    - DomainError (domain-level exceptions)
    - HTTPException (FastAPI exceptions)
    - RequestValidationError (Pydantic validation)
    - Exception (catch-all for unexpected errors)
    """
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, general_exception_handler)  # type: ignore[arg-type]
