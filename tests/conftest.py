"""Pytest configuration for tests."""

import os
from pathlib import Path
from uuid import uuid4

import pytest
import pytest_asyncio
from asyncpg import create_pool
from dotenv import load_dotenv

# Load .env.test file if it exists
env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path)

# Set test environment variables before any imports (only if not already set)
os.environ.setdefault("DATABASE_URL", "postgresql://localhost:5432/recruiterlab_test")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test_service_role_key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test-key")
os.environ.setdefault("LOG_LEVEL", "INFO")

SCHEMA_PATH = Path(__file__).parent.parent / "database" / "schema.sql"


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with an empty rate-limit window."""
    from app.middleware.rate_limit import limiter

    limiter.reset()
    yield


@pytest_asyncio.fixture
async def db_pool():
    """Create a test database connection pool and initialize app's DB.

    Skips the test when Postgres is not reachable.
    """
    from app.core import database as db_module
    from app.core.config import settings

    try:
        pool = await create_pool(
            settings.database_url,
            min_size=1,
            max_size=5,
            init=db_module._init_connection,
        )
    except Exception as e:
        pytest.skip(f"Postgres unavailable: {e}")

    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_PATH.read_text())

    # Initialize the app's database singleton so service functions work
    db_module.db.pool = pool

    yield pool

    db_module.db.pool = None
    await pool.close()


@pytest_asyncio.fixture
async def clean_db(db_pool):
    """Clean database before each test."""
    async with db_pool.acquire() as conn:
        # Reverse dependency order
        await conn.execute("DELETE FROM share_links")
        await conn.execute("DELETE FROM interview_summaries")
        await conn.execute("DELETE FROM summary_templates")
        await conn.execute("DELETE FROM interviews")
        await conn.execute("DELETE FROM usage_analytics")
        await conn.execute("DELETE FROM audit_logs")

    yield db_pool


@pytest.fixture
def owner_id() -> str:
    return str(uuid4())


@pytest_asyncio.fixture
async def sample_interview(clean_db, owner_id):
    """Create an interview in 'uploading' owned by owner_id."""
    async with clean_db.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO interviews (user_id, file_name, file_size, candidate_name, position_title)
            VALUES ($1, $2, $3, $4, $5)
            RETURNING id
            """,
            owner_id,
            "transcript.txt",
            42,
            "Jane Doe",
            "Engineer",
        )

    return {"interview_id": str(row["id"]), "user_id": owner_id}


@pytest_asyncio.fixture
async def sample_template(clean_db, owner_id):
    """Create a summary template owned by owner_id."""
    async with clean_db.acquire() as conn:
        row = await conn.fetchrow(
            """
            INSERT INTO summary_templates (user_id, name, template_content)
            VALUES ($1, $2, $3)
            RETURNING id
            """,
            owner_id,
            "Culture fit",
            {"cultureFit": "string", "strengths": "string"},
        )

    return {"template_id": str(row["id"]), "user_id": owner_id}


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "e2e: marks tests as end-to-end HTTP tests (slower)")
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (medium speed)"
    )
