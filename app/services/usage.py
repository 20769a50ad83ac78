"""Usage analytics and audit logging."""

from __future__ import annotations

from typing import Any

from structlog import get_logger

from app.core.database import db

logger = get_logger()


async def track_usage(
    user_id: str,
    action_type: str,
    resource_type: str | None = None,
    resource_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> None:
    """
    Record a usage event ('upload', 'process', 'share', ...).

    Failures are logged and swallowed: analytics never fail a request.
    """
    try:
        await db.execute(
            """
            INSERT INTO usage_analytics (user_id, action_type, resource_type, resource_id, metadata)
            VALUES ($1, $2, $3, $4, $5)
            """,
            user_id,
            action_type,
            resource_type,
            resource_id,
            metadata,
        )
    except Exception as e:
        logger.warning("usage_tracking_failed", action_type=action_type, error=str(e))
        return

    logger.debug("usage_tracked", action_type=action_type, resource_id=resource_id)


async def log_audit(
    user_id: str,
    action: str,
    resource_type: str,
    resource_id: str,
    metadata: dict[str, Any] | None = None,
) -> None:
    """
    Write an audit_logs row for a destructive action.

    Unlike usage tracking, audit failures propagate.
    """
    await db.execute(
        """
        INSERT INTO audit_logs (user_id, action, resource_type, resource_id, metadata)
        VALUES ($1, $2, $3, $4, $5)
        """,
        user_id,
        action,
        resource_type,
        resource_id,
        metadata,
    )

    logger.info(
        "audit_logged",
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
    )
