"""Interview upload and review endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile, status
from structlog import get_logger

from app.api.deps import get_current_user
from app.core.config import settings
from app.middleware.rate_limit import limiter
from app.models.interviews import (
    InterviewDetailResponse,
    InterviewResponse,
    InterviewsListResponse,
    StatusResponse,
    SummariesListResponse,
    SummaryResponse,
    TranscriptUpdate,
    UploadResponse,
)
from app.services import review as review_service
from app.services.auth import AuthenticatedUser
from app.services.uploads import upload_interview
from app.utils.files import check_upload_size

logger = get_logger()
router = APIRouter(prefix="/interviews", tags=["interviews"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.handler_rate_limit)
async def upload(
    request: Request,
    file: UploadFile = File(...),
    candidate_name: str = Form(""),
    position_title: str = Form(""),
    interview_date: date | None = Form(None),
    consent_obtained: bool = Form(False),
    retention_until: date | None = Form(None),
    template_id: str | None = Form(None),
    user: AuthenticatedUser = Depends(get_current_user),
) -> UploadResponse:
    """
    Upload a transcript (.txt) or audio file and process it.

    Text is analyzed directly; audio is transcribed first. The response
    carries the interview as it stands after processing.
    """
    # The declared size is checked before reading; the read stops at max + 1 bytes
    file_name = file.filename or ""
    if file.size is not None:
        check_upload_size(file_name, file.size, settings.max_upload_bytes)
    content = await file.read(settings.max_upload_bytes + 1)
    check_upload_size(file_name, len(content), settings.max_upload_bytes)

    result = await upload_interview(
        user,
        content=content,
        file_name=file_name,
        content_type=file.content_type,
        candidate_name=candidate_name,
        position_title=position_title,
        interview_date=interview_date,
        consent_obtained=consent_obtained,
        retention_until=retention_until,
        template_id=template_id or None,
    )
    return UploadResponse(
        interview=InterviewResponse.model_validate(result["interview"]),
        summary_id=result["summary_id"],
        transcription=result["transcription"],
    )


@router.get("", response_model=InterviewsListResponse)
async def list_interviews(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: AuthenticatedUser = Depends(get_current_user),
) -> InterviewsListResponse:
    """List the caller's interviews, newest first."""
    interviews = await review_service.list_interviews(user.id, limit=limit, offset=offset)
    return InterviewsListResponse(
        count=len(interviews),
        interviews=[InterviewResponse.model_validate(i) for i in interviews],
    )


@router.get("/{interview_id}", response_model=InterviewDetailResponse)
async def get_interview(
    interview_id: str, user: AuthenticatedUser = Depends(get_current_user)
) -> InterviewDetailResponse:
    """Interview plus its latest summary. Poll this for processing progress."""
    detail = await review_service.get_interview_detail(user.id, interview_id)
    summary = detail["summary"]
    return InterviewDetailResponse(
        interview=InterviewResponse.model_validate(detail["interview"]),
        summary=SummaryResponse.model_validate(summary) if summary else None,
    )


@router.get("/{interview_id}/summaries", response_model=SummariesListResponse)
async def get_summaries(
    interview_id: str, user: AuthenticatedUser = Depends(get_current_user)
) -> SummariesListResponse:
    summaries = await review_service.get_interview_summaries(user.id, interview_id)
    return SummariesListResponse(
        count=len(summaries),
        summaries=[SummaryResponse.model_validate(s) for s in summaries],
    )


@router.patch("/{interview_id}/transcript", response_model=StatusResponse)
async def update_transcript(
    interview_id: str,
    body: TranscriptUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
) -> StatusResponse:
    """Replace the transcript text on the latest summary."""
    await review_service.edit_transcript(user.id, interview_id, body.transcript_text)
    return StatusResponse(message="Transcript updated")


@router.delete("/{interview_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_interview(
    interview_id: str, user: AuthenticatedUser = Depends(get_current_user)
) -> Response:
    """Delete an interview with its summaries, share links and stored file."""
    await review_service.remove_interview(user.id, interview_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
