"""Type definitions for external API responses (only fields we read)."""

from typing import Any, NotRequired, TypedDict


class AuthUserTD(TypedDict):
    """Supabase Auth ``GET /auth/v1/user`` response."""

    id: str
    email: NotRequired[str | None]
    role: NotRequired[str | None]
    user_metadata: NotRequired[dict[str, Any]]


class ChatCompletionTD(TypedDict):
    """Result of one chat completion call."""

    content: str
    model: str
