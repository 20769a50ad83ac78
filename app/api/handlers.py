"""Processing handlers: audio transcription and transcript analysis."""

from fastapi import APIRouter, Depends, Request, Response
from structlog import get_logger

from app.api.deps import get_current_user
from app.core.config import settings
from app.middleware.cors import ALLOWED_HEADERS
from app.middleware.rate_limit import limiter
from app.models.interviews import (
    ProcessInterviewRequest,
    ProcessInterviewResponse,
    TranscribeAudioRequest,
    TranscribeAudioResponse,
)
from app.services.analysis import process_interview
from app.services.auth import AuthenticatedUser
from app.services.transcription import transcribe_interview

logger = get_logger()
router = APIRouter(tags=["handlers"])

PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def preflight() -> Response:
    return Response(status_code=200, headers=PREFLIGHT_HEADERS)


@router.options("/transcribe-audio", include_in_schema=False)
async def transcribe_audio_preflight() -> Response:
    return preflight()


@router.options("/process-interview", include_in_schema=False)
async def process_interview_preflight() -> Response:
    return preflight()


@router.post("/transcribe-audio", response_model=TranscribeAudioResponse)
@limiter.limit(settings.handler_rate_limit)
async def transcribe_audio(
    request: Request,
    body: TranscribeAudioRequest,
    user: AuthenticatedUser = Depends(get_current_user),
) -> TranscribeAudioResponse:
    """
    Transcribe base64 audio for an interview, then analyze the transcript.

    Body: ``{"interviewId": "...", "audioData": "<base64>"}``
    """
    result = await transcribe_interview(user, body.interview_id, body.audio_data)
    return TranscribeAudioResponse(
        transcription=result["transcription"],
        message=result["message"],
    )


@router.post("/process-interview", response_model=ProcessInterviewResponse)
@limiter.limit(settings.handler_rate_limit)
async def process_interview_handler(
    request: Request,
    body: ProcessInterviewRequest,
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProcessInterviewResponse:
    """
    Analyze a transcript and store the summary.

    Body: ``{"interviewId": "...", "transcript": "...", "templateId": "..."}``
    """
    result = await process_interview(user, body.interview_id, body.transcript, body.template_id)
    return ProcessInterviewResponse(summary=result["summary"], summary_id=result["summary_id"])
