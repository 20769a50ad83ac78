"""Database connection pool management."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import asyncpg
from structlog import get_logger

from app.core.config import settings

logger = get_logger()


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode JSON/JSONB columns to Python objects on every pooled connection."""
    for type_name in ("json", "jsonb"):
        await conn.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class Database:
    """Thin wrapper around an asyncpg connection pool."""

    def __init__(self) -> None:
        self.pool: asyncpg.Pool | None = None

    async def connect(self, max_retries: int = 3) -> None:
        """
        Create the connection pool, retrying with exponential backoff.

        Args:
            max_retries: Number of attempts before giving up

        Raises:
            Exception: Last connection error once retries are exhausted
        """
        for attempt in range(1, max_retries + 1):
            try:
                self.pool = await asyncpg.create_pool(
                    settings.database_url,
                    min_size=2,
                    max_size=10,
                    command_timeout=60,
                    init=_init_connection,
                )
                logger.info("database_connected", attempt=attempt)
                return
            except Exception as e:
                logger.warning("database_connect_failed", attempt=attempt, error=str(e))
                if attempt == max_retries:
                    raise
                await asyncio.sleep(2**attempt)

    async def disconnect(self) -> None:
        """Close the pool if it exists."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("database_disconnected")

    def _require_pool(self) -> asyncpg.Pool:
        if not self.pool:
            raise RuntimeError("Database pool not initialized")
        return self.pool

    async def execute(self, query: str, *args: Any) -> str:
        """Execute a statement and return its status string."""
        async with self._require_pool().acquire() as conn:
            return await conn.execute(query, *args)

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        """Fetch all rows."""
        async with self._require_pool().acquire() as conn:
            return await conn.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        """Fetch a single row (or None)."""
        async with self._require_pool().acquire() as conn:
            return await conn.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        """Fetch a single value."""
        async with self._require_pool().acquire() as conn:
            return await conn.fetchval(query, *args)


# Module-level singleton
db = Database()
