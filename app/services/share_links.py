"""Share links: time-bounded, permission-scoped read access to an interview."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from structlog import get_logger

from app.core.config import settings
from app.core.database import db
from app.core.errors import BadRequestError, NotFoundOrForbiddenError, service_boundary
from app.services.interviews import (
    get_interview_by_id,
    get_interview_for_owner,
    get_latest_summary,
    is_valid_uuid,
)
from app.services.usage import log_audit, track_usage
from app.types.database import ShareLinkRecordTD
from app.utils.security import generate_access_token

logger = get_logger()

ALLOWED_PERMISSIONS = frozenset({"view", "comment", "edit"})
DEFAULT_PERMISSIONS = ["view"]

SHARE_LINK_COLUMNS = "id, interview_id, access_token, expires_at, permissions, created_at"


def is_expired(link: ShareLinkRecordTD, now: datetime | None = None) -> bool:
    """Expiry is evaluated at read time; links without expires_at never expire."""
    expires_at = link.get("expires_at")
    if expires_at is None:
        return False
    return expires_at <= (now or datetime.now(UTC))


async def _require_owned_interview(interview_id: str, user_id: str) -> None:
    if not await get_interview_for_owner(interview_id, user_id):
        raise NotFoundOrForbiddenError(
            "Interview not found or unauthorized", context={"interview_id": interview_id}
        )


@service_boundary
async def create_share_link(
    user_id: str,
    interview_id: str,
    expires_in_days: int | None = None,
    permissions: list[str] | None = None,
) -> ShareLinkRecordTD:
    """
    Create a share link for an owned interview.

    Args:
        user_id: Caller (must own the interview)
        interview_id: Interview UUID
        expires_in_days: Lifetime in days (defaults to settings.share_link_default_days)
        permissions: Granted permissions (defaults to ["view"])

    Returns:
        The created link

    Raises:
        NotFoundOrForbiddenError: If the interview is absent or not owned
        BadRequestError: On non-positive lifetime or unknown permissions
    """
    await _require_owned_interview(interview_id, user_id)

    days = settings.share_link_default_days if expires_in_days is None else expires_in_days
    if days <= 0:
        raise BadRequestError("expires_in_days must be positive")

    granted = list(dict.fromkeys(permissions or DEFAULT_PERMISSIONS))
    unknown = set(granted) - ALLOWED_PERMISSIONS
    if unknown:
        raise BadRequestError(
            f"Unknown permissions: {', '.join(sorted(unknown))}",
            context={"allowed": sorted(ALLOWED_PERMISSIONS)},
        )

    expires_at = datetime.now(UTC) + timedelta(days=days)

    row = await db.fetchrow(
        f"""
        INSERT INTO share_links (interview_id, access_token, expires_at, permissions)
        VALUES ($1, $2, $3, $4)
        RETURNING {SHARE_LINK_COLUMNS}
        """,
        interview_id,
        generate_access_token(),
        expires_at,
        granted,
    )
    link = cast(ShareLinkRecordTD, dict(row))  # type: ignore[arg-type]

    logger.info(
        "share_link_created",
        interview_id=interview_id,
        link_id=str(link["id"]),
        expires_at=expires_at.isoformat(),
    )

    await track_usage(
        user_id,
        "share",
        resource_type="interview",
        resource_id=interview_id,
        metadata={"link_id": str(link["id"]), "permissions": granted},
    )

    return link


@service_boundary
async def list_share_links(user_id: str, interview_id: str) -> list[ShareLinkRecordTD]:
    """List links for an owned interview, newest first."""
    await _require_owned_interview(interview_id, user_id)

    rows = await db.fetch(
        f"""
        SELECT {SHARE_LINK_COLUMNS}
        FROM share_links
        WHERE interview_id = $1
        ORDER BY created_at DESC
        """,
        interview_id,
    )
    return [cast(ShareLinkRecordTD, dict(r)) for r in rows]


@service_boundary
async def revoke_share_link(user_id: str, interview_id: str, link_id: str) -> None:
    """
    Delete a link belonging to an owned interview.

    Raises:
        NotFoundOrForbiddenError: If the interview or link is absent or not owned
    """
    await _require_owned_interview(interview_id, user_id)

    if not is_valid_uuid(link_id):
        raise NotFoundOrForbiddenError("Share link not found", context={"link_id": link_id})

    deleted = await db.fetchval(
        """
        DELETE FROM share_links
        WHERE id = $1 AND interview_id = $2
        RETURNING id
        """,
        link_id,
        interview_id,
    )

    if deleted is None:
        raise NotFoundOrForbiddenError("Share link not found", context={"link_id": link_id})

    await log_audit(
        user_id, "share_link_revoked", "share_link", link_id, {"interview_id": interview_id}
    )
    logger.info("share_link_revoked", interview_id=interview_id, link_id=link_id)


@service_boundary
async def resolve_share_link(access_token: str) -> dict[str, Any]:
    """
    Public read through a share token.

    Returns:
        Dict with the link, the interview and its latest summary

    Raises:
        NotFoundOrForbiddenError: If the token is unknown or expired
    """
    row = await db.fetchrow(
        f"SELECT {SHARE_LINK_COLUMNS} FROM share_links WHERE access_token = $1",
        access_token,
    )
    if not row:
        raise NotFoundOrForbiddenError("Share link not found or expired")

    link = cast(ShareLinkRecordTD, dict(row))
    if is_expired(link):
        logger.info("share_link_expired", link_id=str(link["id"]))
        raise NotFoundOrForbiddenError("Share link not found or expired")

    interview_id = str(link["interview_id"])
    interview = await get_interview_by_id(interview_id)
    if not interview:
        raise NotFoundOrForbiddenError("Share link not found or expired")

    summary = await get_latest_summary(interview_id)

    logger.info("share_link_resolved", link_id=str(link["id"]), interview_id=interview_id)
    return {"link": link, "interview": interview, "summary": summary}
