"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings

ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type", "X-Request-ID"]


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS for browser clients.

    Origins come from CORS_ALLOW_ORIGINS (``*`` by default). Credentials are
    bearer headers, never cookies.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=ALLOWED_HEADERS,
        expose_headers=["X-Request-ID"],
    )
