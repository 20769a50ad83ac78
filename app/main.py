"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException

from app.api.errors import setup_exception_handlers
from app.api.handlers import router as handlers_router
from app.api.interviews import router as interviews_router
from app.api.share_links import router as share_links_router
from app.core.database import db
from app.core.logging import logger, setup_logging
from app.middleware import (
    LoggingMiddleware,
    RequestIDMiddleware,
    setup_cors,
    setup_rate_limiting,
)

# Configure logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    logger.info("application_starting")
    await db.connect()
    logger.info("application_ready")

    yield

    logger.info("application_shutting_down")
    await db.disconnect()
    logger.info("application_stopped")


app = FastAPI(
    title="RecruiterLab",
    description="Interview transcription and AI analysis backend",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware runs outermost-last: CORS wraps request id wraps logging
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestIDMiddleware)
setup_cors(app)

setup_exception_handlers(app)
setup_rate_limiting(app)

app.include_router(handlers_router)
app.include_router(interviews_router)
app.include_router(share_links_router)


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Health check endpoint.

    Verifies database connectivity and reports pool stats.

    Raises:
        HTTPException: 503 if database is unavailable
    """
    try:
        await db.fetchval("SELECT 1")

        if not db.pool:
            raise RuntimeError("Database pool not initialized")

        pool_size = db.pool.get_size()
        pool_free = db.pool.get_idle_size()

        return {
            "status": "healthy",
            "database": "connected",
            "pool": {
                "size": pool_size,
                "free": pool_free,
                "in_use": pool_size - pool_free,
            },
        }
    except Exception as e:
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail="Database unavailable") from e


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "RecruiterLab API"}
