"""Pydantic models for the processing handlers and review endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# ============================================
# Handler Models (camelCase wire format)
# ============================================


class CamelModel(BaseModel):
    """Accepts and emits camelCase aliases, also accepts field names."""

    model_config = ConfigDict(populate_by_name=True)


class TranscribeAudioRequest(CamelModel):
    """Body of POST /transcribe-audio.

    Fields are optional so missing values surface as BadRequest from the
    service rather than as a schema validation error.
    """

    interview_id: str | None = Field(default=None, alias="interviewId")
    audio_data: str | None = Field(default=None, alias="audioData")


class TranscribeAudioResponse(CamelModel):
    """Successful transcription + analysis."""

    success: bool = True
    transcription: str
    message: str


class ProcessInterviewRequest(CamelModel):
    """Body of POST /process-interview."""

    interview_id: str | None = Field(default=None, alias="interviewId")
    transcript: str | None = None
    template_id: str | None = Field(default=None, alias="templateId")


class ProcessInterviewResponse(CamelModel):
    """Successful analysis."""

    success: bool = True
    summary: dict[str, Any]
    summary_id: str = Field(alias="summaryId")


# ============================================
# Review Models
# ============================================


class InterviewResponse(BaseModel):
    """Interview row as returned to its owner."""

    id: UUID
    file_name: str
    file_size: int | None = None
    file_url: str | None = None
    candidate_name: str | None = None
    position_title: str | None = None
    interview_date: date | None = None
    duration_seconds: int | None = None
    status: str
    consent_obtained: bool = False
    retention_until: date | None = None
    version: int
    created_at: datetime
    updated_at: datetime


class SummaryResponse(BaseModel):
    """Stored summary."""

    id: UUID
    interview_id: UUID
    template_id: UUID | None = None
    summary_content: dict[str, Any] | None = None
    transcript_text: str | None = None
    ai_model_used: str | None = None
    processing_time_seconds: int | None = None
    created_at: datetime


class InterviewsListResponse(BaseModel):
    """Response for interviews list."""

    count: int
    interviews: list[InterviewResponse]


class InterviewDetailResponse(BaseModel):
    """Interview plus its latest summary."""

    interview: InterviewResponse
    summary: SummaryResponse | None = None


class SummariesListResponse(BaseModel):
    """All summaries of one interview."""

    count: int
    summaries: list[SummaryResponse]


class UploadResponse(BaseModel):
    """Result of POST /interviews."""

    success: bool = True
    interview: InterviewResponse
    summary_id: str
    transcription: str | None = None


class TranscriptUpdate(BaseModel):
    """Edited transcript text."""

    transcript_text: str


class StatusResponse(BaseModel):
    """Generic acknowledgement."""

    success: bool = True
    message: str


# ============================================
# Share Link Models
# ============================================


class ShareLinkCreate(BaseModel):
    """Model for creating a share link."""

    expires_in_days: int | None = Field(default=None, gt=0, le=365)
    permissions: list[str] | None = None


class ShareLinkResponse(BaseModel):
    """Share link as shown to the interview owner."""

    id: UUID
    interview_id: UUID
    access_token: str
    expires_at: datetime | None = None
    permissions: list[str]
    created_at: datetime


class ShareLinksListResponse(BaseModel):
    """Response for share link list."""

    count: int
    links: list[ShareLinkResponse]


class SharedInterview(BaseModel):
    """Interview fields exposed through a share link (no owner data)."""

    id: UUID
    candidate_name: str | None = None
    position_title: str | None = None
    interview_date: date | None = None
    status: str
    created_at: datetime


class SharedSummary(BaseModel):
    """Summary fields exposed through a share link."""

    summary_content: dict[str, Any] | None = None
    transcript_text: str | None = None
    created_at: datetime


class SharedInterviewResponse(BaseModel):
    """Public read through a share token."""

    interview: SharedInterview
    summary: SharedSummary | None = None
    permissions: list[str]
    expires_at: datetime | None = None
