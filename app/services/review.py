"""Owner-facing review operations over stored interviews and summaries."""

from __future__ import annotations

from typing import Any
from urllib.parse import unquote

from structlog import get_logger

from app.clients.supabase import supabase_client
from app.core.errors import BadRequestError, NotFoundOrForbiddenError, service_boundary
from app.services.interviews import (
    delete_interview,
    get_interview_for_owner,
    get_latest_summary,
    list_interviews_for_owner,
    list_summaries,
    update_latest_transcript,
)
from app.services.usage import log_audit
from app.types.database import InterviewRecordTD, InterviewSummaryRecordTD

logger = get_logger()


async def _owned_interview(interview_id: str, user_id: str) -> InterviewRecordTD:
    interview = await get_interview_for_owner(interview_id, user_id)
    if not interview:
        raise NotFoundOrForbiddenError(
            "Interview not found or unauthorized", context={"interview_id": interview_id}
        )
    return interview


def object_path_from_url(file_url: str) -> str:
    """Recover the bucket object key (last two path segments) from a stored URL."""
    return unquote("/".join(file_url.rstrip("/").split("/")[-2:]))


@service_boundary
async def list_interviews(
    user_id: str, limit: int = 50, offset: int = 0
) -> list[InterviewRecordTD]:
    """List the caller's interviews."""
    return await list_interviews_for_owner(user_id, limit=limit, offset=offset)


@service_boundary
async def get_interview_detail(user_id: str, interview_id: str) -> dict[str, Any]:
    """
    Interview plus the summary surfaced to the UI (latest by created_at).

    Raises:
        NotFoundOrForbiddenError: If the interview is absent or not owned
    """
    interview = await _owned_interview(interview_id, user_id)
    summary = await get_latest_summary(interview_id)
    return {"interview": interview, "summary": summary}


@service_boundary
async def get_interview_summaries(
    user_id: str, interview_id: str
) -> list[InterviewSummaryRecordTD]:
    """Every summary stored for an owned interview, newest first."""
    await _owned_interview(interview_id, user_id)
    return await list_summaries(interview_id)


@service_boundary
async def edit_transcript(user_id: str, interview_id: str, transcript_text: str) -> None:
    """
    Save an edited transcript onto the latest summary.

    Raises:
        NotFoundOrForbiddenError: If the interview is absent or not owned
        BadRequestError: If the interview has no summary yet
    """
    await _owned_interview(interview_id, user_id)

    if not await update_latest_transcript(interview_id, transcript_text):
        raise BadRequestError(
            "Interview has no summary to update", context={"interview_id": interview_id}
        )

    logger.info("transcript_updated", interview_id=interview_id, length=len(transcript_text))


@service_boundary
async def remove_interview(user_id: str, interview_id: str) -> None:
    """
    Delete an owned interview, its stored file and (by cascade) its summaries
    and share links.

    The stored object is removed before the row, so a storage failure leaves
    the row intact.

    Raises:
        NotFoundOrForbiddenError: If the interview is absent or not owned
        UpstreamError: If the stored object cannot be removed (nothing deleted)
    """
    interview = await _owned_interview(interview_id, user_id)

    file_url = interview.get("file_url")
    if file_url:
        await supabase_client.remove_object(object_path_from_url(file_url))

    deleted = await delete_interview(interview_id, user_id)
    if not deleted:
        raise NotFoundOrForbiddenError(
            "Interview not found or unauthorized", context={"interview_id": interview_id}
        )

    await log_audit(
        user_id,
        "interview_deleted",
        "interview",
        interview_id,
        {"file_name": deleted["file_name"]},
    )
    logger.info("interview_deleted", interview_id=interview_id)
