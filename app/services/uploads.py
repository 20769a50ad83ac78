"""Server-side upload flow: validate, store, then dispatch to processing."""

from __future__ import annotations

from datetime import date
from typing import TypedDict

from structlog import get_logger

from app.clients.supabase import supabase_client
from app.core.config import settings
from app.core.errors import BadRequestError, service_boundary
from app.services.analysis import mark_failed_if_configured, process_interview
from app.services.auth import AuthenticatedUser
from app.services.interviews import (
    PROCESSING,
    create_interview,
    get_interview_for_owner,
    set_file_url,
    update_interview_status,
)
from app.services.transcription import transcribe_and_analyze
from app.services.usage import track_usage
from app.types.database import InterviewRecordTD
from app.utils.files import is_text_file, storage_path, validate_upload

logger = get_logger()


class UploadResult(TypedDict):
    """Interview after processing plus what processing produced."""

    interview: InterviewRecordTD
    summary_id: str
    transcription: str | None


def _decode_transcript(content: bytes) -> str:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise BadRequestError("Transcript file must be UTF-8 text") from e

    if not text.strip():
        raise BadRequestError("Transcript file is empty")
    return text


@service_boundary
async def upload_interview(
    user: AuthenticatedUser,
    content: bytes,
    file_name: str,
    content_type: str | None,
    candidate_name: str,
    position_title: str,
    interview_date: date | None = None,
    consent_obtained: bool = False,
    retention_until: date | None = None,
    template_id: str | None = None,
) -> UploadResult:
    """
    Create an interview from an uploaded file and run the processing pipeline.

    Steps: validate, create row (``uploading``), store the object at
    ``{ownerId}/{interviewId}-{filename}``, record ``file_url``, move to
    ``processing``, then analyze text directly or transcribe audio first.

    Raises:
        BadRequestError: On missing fields, disallowed/oversized files, blank
            transcripts, or audio without recording consent
        UpstreamError: If storage or AI calls fail
        EmptyTranscriptError: If audio transcription yields nothing
    """
    candidate_name = (candidate_name or "").strip()
    position_title = (position_title or "").strip()
    if not candidate_name or not position_title:
        raise BadRequestError("Please fill in candidate name, position, and select a file")

    validate_upload(file_name, content_type, len(content), settings.max_upload_bytes)

    text_file = is_text_file(file_name, content_type)
    transcript = _decode_transcript(content) if text_file else None

    if not text_file and not consent_obtained:
        raise BadRequestError(
            "Recording consent is required for audio uploads",
            context={"file_name": file_name},
        )

    interview = await create_interview(
        user_id=user.id,
        file_name=file_name,
        file_size=len(content),
        candidate_name=candidate_name,
        position_title=position_title,
        interview_date=interview_date,
        consent_obtained=consent_obtained,
        retention_until=retention_until,
    )
    interview_id = str(interview["id"])

    try:
        object_path = storage_path(user.id, interview_id, file_name)
        file_url = await supabase_client.upload_object(
            object_path, content, content_type or "application/octet-stream"
        )
        await set_file_url(interview_id, file_url)

        await track_usage(
            user.id,
            "upload",
            resource_type="interview",
            resource_id=interview_id,
            metadata={"file_name": file_name, "file_size": len(content)},
        )

        await update_interview_status(interview_id, PROCESSING)

        transcription: str | None = None
        if transcript is not None:
            analysis = await process_interview(user, interview_id, transcript, template_id)
            summary_id = analysis["summary_id"]
        else:
            result = await transcribe_and_analyze(
                user,
                interview_id,
                content,
                file_name=file_name,
                content_type=content_type or "application/octet-stream",
                template_id=template_id,
            )
            summary_id = result["summary_id"]
            transcription = result["transcription"]
    except Exception as e:
        await mark_failed_if_configured(interview_id, e)
        raise

    refreshed = await get_interview_for_owner(interview_id, user.id)

    logger.info("interview_upload_processed", interview_id=interview_id, summary_id=summary_id)

    return {
        "interview": refreshed or interview,
        "summary_id": summary_id,
        "transcription": transcription,
    }
