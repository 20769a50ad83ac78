"""E2E test fixtures for HTTP testing."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.main import app


@pytest_asyncio.fixture
async def http_client(clean_db):
    """HTTP client for testing actual FastAPI app.

    Uses the clean_db fixture to ensure database is clean for each test.
    The app's lifespan is not run; clean_db already wired the pool.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_user_id() -> str:
    return str(uuid4())


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer e2e-access-token"}


@pytest.fixture
def mock_supabase(auth_user_id):
    """Accept any bearer token as auth_user_id and store objects in memory."""
    stored: dict[str, bytes] = {}

    async def upload_object(path: str, data: bytes, content_type: str) -> str:
        stored[path] = data
        return f"https://project.supabase.test/storage/v1/object/interview-audio/{path}"

    with (
        patch(
            "app.services.auth.supabase_client.get_user",
            new_callable=AsyncMock,
            return_value={"id": auth_user_id, "email": "recruiter@example.com"},
        ),
        patch(
            "app.services.uploads.supabase_client.upload_object",
            side_effect=upload_object,
        ),
        patch("app.services.review.supabase_client.remove_object", new_callable=AsyncMock),
    ):
        yield stored


@pytest.fixture
def mock_openai():
    """Mock OpenAI calls; tests set return values as needed."""
    with (
        patch(
            "app.services.transcription.openai_client.transcribe", new_callable=AsyncMock
        ) as transcribe,
        patch(
            "app.services.analysis.openai_client.chat_completion", new_callable=AsyncMock
        ) as chat,
    ):
        yield {"transcribe": transcribe, "chat_completion": chat}
