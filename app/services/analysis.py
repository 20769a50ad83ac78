"""Interview analysis: prompt building, completion parsing and persistence."""

from __future__ import annotations

import json
import math
import time
from typing import Any, TypedDict

from structlog import get_logger

from app.clients.openai import openai_client
from app.core.config import settings
from app.core.errors import BadRequestError, NotFoundOrForbiddenError, service_boundary
from app.services.auth import AuthenticatedUser
from app.services.interviews import (
    COMPLETED,
    FAILED,
    get_interview_for_owner,
    insert_summary,
    update_interview_status,
)
from app.services.templates import get_template_for_owner
from app.services.usage import track_usage

logger = get_logger()

SUMMARY_KEYS = ("jobSummary", "mustHaves", "challenges", "jobDescription", "recapEmail")
FALLBACK_PLACEHOLDER = "Please review the full analysis"
FALLBACK_SUMMARY_CHARS = 500

PROMPT_PREAMBLE = "You are an expert hiring manager analyzing interview transcripts."

DEFAULT_SYSTEM_PROMPT = f"""{PROMPT_PREAMBLE} Provide a structured analysis with the following sections:
1. Job Summary - Brief overview of the role and key requirements
2. Must-Haves - Critical skills and qualifications mentioned
3. Challenges - Potential concerns or red flags identified
4. Job Description - Suggested improvements to job posting
5. Recap Email - Draft follow-up email to candidate

Return your response as a JSON object with these exact keys: {", ".join(SUMMARY_KEYS)}"""


class AnalysisResult(TypedDict):
    """Outcome of a successful analysis."""

    summary: dict[str, Any]
    summary_id: str


def build_system_prompt(template_content: Any | None = None) -> str:
    """
    System prompt for the completion call.

    Args:
        template_content: JSON-serializable template structure, or None for
            the fixed five-section prompt

    Returns:
        Prompt text
    """
    if template_content is None:
        return DEFAULT_SYSTEM_PROMPT
    return f"{PROMPT_PREAMBLE} Use this template structure: {json.dumps(template_content)}"


def build_user_prompt(transcript: str) -> str:
    return f"Please analyze this interview transcript:\n\n{transcript}"


def fallback_summary(raw_text: str) -> dict[str, Any]:
    """Degraded summary used when the model output is not a JSON object."""
    summary: dict[str, Any] = {key: FALLBACK_PLACEHOLDER for key in SUMMARY_KEYS}
    summary["jobSummary"] = raw_text[:FALLBACK_SUMMARY_CHARS]
    return summary


def parse_summary_content(
    raw_text: str, use_default_shape: bool = True
) -> tuple[dict[str, Any], bool]:
    """
    Parse model output into summary content.

    With the default prompt the result always carries exactly the five
    summary keys (missing ones get the placeholder). Template output is kept
    as parsed.

    Args:
        raw_text: Model message content
        use_default_shape: Whether the default five-section prompt was used

    Returns:
        (summary content, whether the fallback was applied)
    """
    try:
        parsed = json.loads(raw_text)
    except (json.JSONDecodeError, TypeError):
        parsed = None

    if not isinstance(parsed, dict):
        logger.warning("summary_parse_fallback", raw_chars=len(raw_text or ""))
        return fallback_summary(raw_text or ""), True

    if not use_default_shape:
        return parsed, False

    extra = sorted(set(parsed) - set(SUMMARY_KEYS))
    if extra:
        logger.info("summary_extra_keys_dropped", keys=extra)

    return {key: parsed.get(key, FALLBACK_PLACEHOLDER) for key in SUMMARY_KEYS}, False


async def mark_failed_if_configured(interview_id: str, error: Exception) -> None:
    """Move the interview to ``failed`` when failure transitions are enabled."""
    if not settings.mark_failed_on_error:
        return

    logger.info(
        "marking_interview_failed",
        interview_id=interview_id,
        error_type=type(error).__name__,
    )
    try:
        await update_interview_status(interview_id, FAILED)
    except Exception:
        # The caller re-raises the original error
        logger.exception("mark_failed_error", interview_id=interview_id)


@service_boundary
async def process_interview(
    user: AuthenticatedUser,
    interview_id: str | None,
    transcript: str | None,
    template_id: str | None = None,
) -> AnalysisResult:
    """
    Analyze a transcript and store the resulting summary.

    Args:
        user: Authenticated caller
        interview_id: Interview UUID (must be owned by the caller)
        transcript: Transcript text
        template_id: Optional template UUID; unusable ids fall back to the
            default prompt

    Returns:
        The stored summary content and its row id

    Raises:
        BadRequestError: If interview_id or transcript is missing
        NotFoundOrForbiddenError: If the interview is absent or not owned
        UpstreamError: If the completion call fails
        PersistenceError: If the summary insert fails (status left unchanged)
    """
    if not interview_id or transcript is None:
        raise BadRequestError("Missing interviewId or transcript")

    interview = await get_interview_for_owner(interview_id, user.id)
    if not interview:
        raise NotFoundOrForbiddenError(
            "Interview not found or unauthorized", context={"interview_id": interview_id}
        )

    logger.info("processing_interview", interview_id=interview_id, user_id=user.id)

    try:
        return await _analyze_and_store(user, interview_id, transcript, template_id)
    except Exception as e:
        await mark_failed_if_configured(interview_id, e)
        raise


async def _analyze_and_store(
    user: AuthenticatedUser,
    interview_id: str,
    transcript: str,
    template_id: str | None,
) -> AnalysisResult:
    template = await get_template_for_owner(template_id, user.id) if template_id else None
    template_content = template.get("template_content") if template else None
    if template and template_content is None:
        logger.warning("template_has_no_content", template_id=template_id)
    used_template_id = str(template["id"]) if template and template_content is not None else None

    system_prompt = build_system_prompt(template_content)

    start = time.monotonic()
    completion = await openai_client.chat_completion(system_prompt, build_user_prompt(transcript))

    summary_content, used_fallback = parse_summary_content(
        completion["content"], use_default_shape=template_content is None
    )
    processing_time = math.floor(time.monotonic() - start)

    summary = await insert_summary(
        interview_id=interview_id,
        summary_content=summary_content,
        transcript_text=transcript,
        ai_model_used=completion["model"],
        processing_time_seconds=processing_time,
        template_id=used_template_id,
    )

    await update_interview_status(interview_id, COMPLETED)

    logger.info(
        "interview_processed",
        interview_id=interview_id,
        summary_id=str(summary["id"]),
        processing_time_seconds=processing_time,
        parse_fallback=used_fallback,
    )

    await track_usage(
        user.id,
        "process",
        resource_type="interview",
        resource_id=interview_id,
        metadata={"summary_id": str(summary["id"]), "template_id": used_template_id},
    )

    return {"summary": summary_content, "summary_id": str(summary["id"])}
