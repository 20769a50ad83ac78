"""Interview and summary persistence, always scoped to the owning user."""

from __future__ import annotations

from datetime import date
from typing import Any, cast
from uuid import UUID

from structlog import get_logger

from app.core.database import db
from app.types.database import InterviewRecordTD, InterviewSummaryRecordTD

logger = get_logger()

UPLOADING = "uploading"
PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"

# Forward-only status model: target -> statuses it may be entered from
ALLOWED_TRANSITIONS: dict[str, tuple[str, ...]] = {
    PROCESSING: (UPLOADING, PROCESSING),
    COMPLETED: (UPLOADING, PROCESSING, COMPLETED),
    FAILED: (UPLOADING, PROCESSING),
}

INTERVIEW_COLUMNS = """
    id, user_id, file_name, file_size, file_url, candidate_name, position_title,
    interview_date, duration_seconds, status, consent_obtained, retention_until,
    version, created_at, updated_at
"""

SUMMARY_COLUMNS = """
    id, interview_id, template_id, summary_content, transcript_text,
    ai_model_used, processing_time_seconds, created_at
"""


def is_valid_uuid(value: str) -> bool:
    """Malformed ids can never match a row, so callers treat them as not found."""
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


async def create_interview(
    user_id: str,
    file_name: str,
    file_size: int,
    candidate_name: str,
    position_title: str,
    interview_date: date | None = None,
    consent_obtained: bool = False,
    retention_until: date | None = None,
) -> InterviewRecordTD:
    """
    Insert a new interview in the ``uploading`` state.

    Returns:
        The created interview record
    """
    row = await db.fetchrow(
        f"""
        INSERT INTO interviews
        (user_id, file_name, file_size, candidate_name, position_title,
         interview_date, consent_obtained, retention_until, status)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, '{UPLOADING}')
        RETURNING {INTERVIEW_COLUMNS}
        """,
        user_id,
        file_name,
        file_size,
        candidate_name,
        position_title,
        interview_date,
        consent_obtained,
        retention_until,
    )

    interview = cast(InterviewRecordTD, dict(row))  # type: ignore[arg-type]
    logger.info("interview_created", interview_id=str(interview["id"]), user_id=user_id)
    return interview


async def get_interview_for_owner(interview_id: str, user_id: str) -> InterviewRecordTD | None:
    """
    Fetch an interview only if ``user_id`` owns it.

    Returns:
        Interview record, or None when absent or owned by someone else
    """
    if not is_valid_uuid(interview_id):
        return None

    row = await db.fetchrow(
        f"""
        SELECT {INTERVIEW_COLUMNS}
        FROM interviews
        WHERE id = $1 AND user_id = $2
        """,
        interview_id,
        user_id,
    )
    return cast(InterviewRecordTD, dict(row)) if row else None


async def get_interview_by_id(interview_id: str) -> InterviewRecordTD | None:
    """Unscoped lookup, used only behind a verified share token."""
    if not is_valid_uuid(interview_id):
        return None

    row = await db.fetchrow(
        f"SELECT {INTERVIEW_COLUMNS} FROM interviews WHERE id = $1",
        interview_id,
    )
    return cast(InterviewRecordTD, dict(row)) if row else None


async def list_interviews_for_owner(
    user_id: str, limit: int = 50, offset: int = 0
) -> list[InterviewRecordTD]:
    """List the caller's interviews, newest first."""
    rows = await db.fetch(
        f"""
        SELECT {INTERVIEW_COLUMNS}
        FROM interviews
        WHERE user_id = $1
        ORDER BY created_at DESC
        LIMIT $2 OFFSET $3
        """,
        user_id,
        limit,
        offset,
    )
    return [cast(InterviewRecordTD, dict(r)) for r in rows]


async def set_file_url(interview_id: str, file_url: str) -> None:
    """Record where the uploaded file lives."""
    await db.execute(
        """
        UPDATE interviews
        SET file_url = $2, updated_at = NOW()
        WHERE id = $1
        """,
        interview_id,
        file_url,
    )


async def update_interview_status(interview_id: str, status: str) -> bool:
    """
    Move an interview to ``status`` if the forward-only model allows it.

    The guard and the write are one statement, and ``version`` is bumped on
    every successful transition.

    Args:
        interview_id: Interview UUID
        status: Target status

    Returns:
        True if the row was updated, False if the transition was rejected
        (unknown interview, or current status not an allowed predecessor)

    Raises:
        ValueError: If ``status`` is not a known target status
    """
    if status not in ALLOWED_TRANSITIONS:
        raise ValueError(f"Unknown interview status: {status}")

    new_version = await db.fetchval(
        """
        UPDATE interviews
        SET status = $2, version = version + 1, updated_at = NOW()
        WHERE id = $1 AND status = ANY($3::text[])
        RETURNING version
        """,
        interview_id,
        status,
        list(ALLOWED_TRANSITIONS[status]),
    )

    if new_version is None:
        logger.warning(
            "interview_status_transition_rejected",
            interview_id=interview_id,
            target_status=status,
        )
        return False

    logger.info(
        "interview_status_updated",
        interview_id=interview_id,
        status=status,
        version=new_version,
    )
    return True


async def delete_interview(interview_id: str, user_id: str) -> InterviewRecordTD | None:
    """
    Delete an owned interview (summaries and share links cascade).

    Returns:
        The deleted record, or None if nothing owned matched
    """
    if not is_valid_uuid(interview_id):
        return None

    row = await db.fetchrow(
        f"""
        DELETE FROM interviews
        WHERE id = $1 AND user_id = $2
        RETURNING {INTERVIEW_COLUMNS}
        """,
        interview_id,
        user_id,
    )
    return cast(InterviewRecordTD, dict(row)) if row else None


async def insert_summary(
    interview_id: str,
    summary_content: dict[str, Any],
    transcript_text: str,
    ai_model_used: str,
    processing_time_seconds: int,
    template_id: str | None = None,
) -> InterviewSummaryRecordTD:
    """
    Insert a summary row. Many summaries per interview are allowed.

    Returns:
        The inserted summary record
    """
    row = await db.fetchrow(
        f"""
        INSERT INTO interview_summaries
        (interview_id, template_id, summary_content, transcript_text,
         ai_model_used, processing_time_seconds)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {SUMMARY_COLUMNS}
        """,
        interview_id,
        template_id,
        summary_content,
        transcript_text,
        ai_model_used,
        processing_time_seconds,
    )
    return cast(InterviewSummaryRecordTD, dict(row))  # type: ignore[arg-type]


async def get_latest_summary(interview_id: str) -> InterviewSummaryRecordTD | None:
    """The summary surfaced to the UI: newest by created_at."""
    row = await db.fetchrow(
        f"""
        SELECT {SUMMARY_COLUMNS}
        FROM interview_summaries
        WHERE interview_id = $1
        ORDER BY created_at DESC
        LIMIT 1
        """,
        interview_id,
    )
    return cast(InterviewSummaryRecordTD, dict(row)) if row else None


async def list_summaries(interview_id: str) -> list[InterviewSummaryRecordTD]:
    """All summaries for an interview, newest first."""
    rows = await db.fetch(
        f"""
        SELECT {SUMMARY_COLUMNS}
        FROM interview_summaries
        WHERE interview_id = $1
        ORDER BY created_at DESC
        """,
        interview_id,
    )
    return [cast(InterviewSummaryRecordTD, dict(r)) for r in rows]


async def update_latest_transcript(interview_id: str, transcript_text: str) -> bool:
    """
    Replace the transcript text on the newest summary.

    Returns:
        True if a summary existed and was updated
    """
    summary_id = await db.fetchval(
        """
        UPDATE interview_summaries
        SET transcript_text = $2
        WHERE id = (
            SELECT id FROM interview_summaries
            WHERE interview_id = $1
            ORDER BY created_at DESC
            LIMIT 1
        )
        RETURNING id
        """,
        interview_id,
        transcript_text,
    )
    return summary_id is not None
