"""Database record type definitions.

NOTE: This file must track database/schema.sql manually.
Use NotRequired for nullable/optional columns.
Add new types incrementally as needed - don't create unused types.
"""

from datetime import date, datetime
from typing import Any, NotRequired, TypedDict
from uuid import UUID


class InterviewRecordTD(TypedDict):
    """Record from interviews table."""

    id: UUID
    user_id: UUID
    file_name: str
    file_size: NotRequired[int | None]
    file_url: NotRequired[str | None]
    candidate_name: NotRequired[str | None]
    position_title: NotRequired[str | None]
    interview_date: NotRequired[date | None]
    duration_seconds: NotRequired[int | None]
    status: str
    consent_obtained: bool
    retention_until: NotRequired[date | None]
    version: int
    created_at: datetime
    updated_at: datetime


class InterviewSummaryRecordTD(TypedDict):
    """Record from interview_summaries table."""

    id: UUID
    interview_id: UUID
    template_id: NotRequired[UUID | None]
    summary_content: dict[str, Any]  # JSONB, decoded by the pool codec
    transcript_text: NotRequired[str | None]
    ai_model_used: NotRequired[str | None]
    processing_time_seconds: NotRequired[int | None]
    created_at: datetime


class SummaryTemplateRecordTD(TypedDict):
    """Record from summary_templates table (subset read at analysis time)."""

    id: UUID
    name: str
    template_content: NotRequired[dict[str, Any] | None]


class ShareLinkRecordTD(TypedDict):
    """Record from share_links table."""

    id: UUID
    interview_id: UUID
    access_token: str
    expires_at: NotRequired[datetime | None]
    permissions: list[str]
    created_at: datetime
