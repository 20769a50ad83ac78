"""Type definitions for database records."""

from app.types.database import (
    InterviewRecordTD,
    InterviewSummaryRecordTD,
    ShareLinkRecordTD,
    SummaryTemplateRecordTD,
)

__all__ = [
    "InterviewRecordTD",
    "InterviewSummaryRecordTD",
    "ShareLinkRecordTD",
    "SummaryTemplateRecordTD",
]
