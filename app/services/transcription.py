"""Audio transcription pipeline: decode, speech-to-text, then analysis."""

from __future__ import annotations

from typing import TypedDict

from structlog import get_logger

from app.clients.openai import openai_client
from app.core.config import settings
from app.core.errors import (
    BadRequestError,
    EmptyTranscriptError,
    NotFoundOrForbiddenError,
    service_boundary,
)
from app.services.analysis import mark_failed_if_configured, process_interview
from app.services.auth import AuthenticatedUser
from app.services.interviews import PROCESSING, get_interview_for_owner, update_interview_status
from app.utils.encoding import decode_base64_chunks

logger = get_logger()

DEFAULT_AUDIO_FILE_NAME = "audio.webm"
DEFAULT_AUDIO_CONTENT_TYPE = "audio/webm"


class TranscriptionResult(TypedDict):
    """Outcome of a successful transcription + analysis."""

    transcription: str
    message: str
    summary_id: str


@service_boundary
async def transcribe_interview(
    user: AuthenticatedUser,
    interview_id: str | None,
    audio_data: str | None,
) -> TranscriptionResult:
    """
    Transcribe base64 audio for an owned interview and analyze the transcript.

    The interview is moved to ``processing`` before decoding. Later failures
    leave it there unless ``mark_failed_on_error`` is enabled.

    Args:
        user: Authenticated caller
        interview_id: Interview UUID
        audio_data: Base64-encoded audio ("" is a present, empty payload)

    Returns:
        Transcript text, status message and the stored summary id

    Raises:
        BadRequestError: If interview_id/audio_data is missing or not base64
        NotFoundOrForbiddenError: If the interview is absent or not owned
        EmptyTranscriptError: If there is no audio or the transcript is blank
        UpstreamError: If the speech-to-text or completion call fails
    """
    if not interview_id or audio_data is None:
        raise BadRequestError("Missing interviewId or audioData")

    interview = await get_interview_for_owner(interview_id, user.id)
    if not interview:
        raise NotFoundOrForbiddenError(
            "Interview not found or unauthorized", context={"interview_id": interview_id}
        )

    logger.info("processing_audio_transcription", interview_id=interview_id, user_id=user.id)

    await update_interview_status(interview_id, PROCESSING)

    try:
        audio = decode_base64_chunks(audio_data, chunk_size=settings.base64_chunk_size)
        logger.info("audio_decoded", interview_id=interview_id, size=len(audio))

        return await transcribe_and_analyze(user, interview_id, audio)
    except Exception as e:
        await mark_failed_if_configured(interview_id, e)
        raise


async def transcribe_and_analyze(
    user: AuthenticatedUser,
    interview_id: str,
    audio: bytes,
    file_name: str = DEFAULT_AUDIO_FILE_NAME,
    content_type: str = DEFAULT_AUDIO_CONTENT_TYPE,
    template_id: str | None = None,
) -> TranscriptionResult:
    """
    Send audio to speech-to-text, then run analysis on the transcript.

    Callers own the status transition to ``processing`` and failure handling.
    """
    if not audio:
        raise EmptyTranscriptError(
            "No audio data to transcribe", context={"interview_id": interview_id}
        )

    transcript = await openai_client.transcribe(
        audio, file_name=file_name, content_type=content_type
    )

    if not transcript or not transcript.strip():
        raise EmptyTranscriptError(
            "No transcription received from OpenAI", context={"interview_id": interview_id}
        )

    logger.info("transcription_received", interview_id=interview_id, length=len(transcript))

    analysis = await process_interview(user, interview_id, transcript, template_id)

    logger.info(
        "audio_transcribed_and_analyzed",
        interview_id=interview_id,
        summary_id=analysis["summary_id"],
    )

    return {
        "transcription": transcript,
        "message": "Audio transcribed and analyzed successfully",
        "summary_id": analysis["summary_id"],
    }
