"""Upload file classification and validation."""

from __future__ import annotations

from pathlib import PurePosixPath

from app.core.errors import BadRequestError

ALLOWED_CONTENT_TYPES = frozenset(
    {
        "text/plain",
        "audio/mpeg",
        "audio/wav",
        "audio/mp4",
        "audio/x-m4a",
        "audio/aac",
        "audio/ogg",
        "audio/webm",
        "audio/flac",
    }
)
ALLOWED_EXTENSIONS = frozenset({"txt", "mp3", "wav", "m4a", "mp4", "aac", "ogg", "webm", "flac"})
TEXT_EXTENSIONS = frozenset({"txt"})


def file_extension(file_name: str) -> str:
    """Lower-cased extension without the dot ("" when absent)."""
    return PurePosixPath(file_name).suffix.lower().lstrip(".")


def is_text_file(file_name: str, content_type: str | None = None) -> bool:
    """Text transcripts go straight to analysis; everything else is audio."""
    if file_extension(file_name) in TEXT_EXTENSIONS:
        return True
    return content_type == "text/plain"


def check_upload_size(file_name: str, size: int, max_bytes: int) -> None:
    """Reject uploads above the size ceiling."""
    if size > max_bytes:
        raise BadRequestError(
            f"File too large: maximum size is {max_bytes // (1024 * 1024)}MB",
            context={"file_name": file_name, "size": size},
        )


def validate_upload(
    file_name: str,
    content_type: str | None,
    size: int,
    max_bytes: int,
) -> None:
    """
    Enforce the upload allow-list and size ceiling.

    Either the content type or the extension must be allowed.

    Raises:
        BadRequestError: On empty, oversized or disallowed files
    """
    if not file_name:
        raise BadRequestError("Missing file name")

    if size <= 0:
        raise BadRequestError("Uploaded file is empty", context={"file_name": file_name})

    check_upload_size(file_name, size, max_bytes)

    if (content_type or "") not in ALLOWED_CONTENT_TYPES and (
        file_extension(file_name) not in ALLOWED_EXTENSIONS
    ):
        raise BadRequestError(
            "Invalid file type: please select a text or audio file",
            context={"file_name": file_name, "content_type": content_type},
        )


def storage_path(owner_id: str, interview_id: str, file_name: str) -> str:
    """Object key inside the bucket: ``{ownerId}/{interviewId}-{filename}``."""
    safe_name = PurePosixPath(file_name).name
    return f"{owner_id}/{interview_id}-{safe_name}"
