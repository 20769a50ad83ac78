"""Tests for owner-facing review operations (app/services/review.py)."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from app.core.errors import BadRequestError, NotFoundOrForbiddenError, UpstreamError
from app.services.review import (
    edit_transcript,
    get_interview_detail,
    get_interview_summaries,
    list_interviews,
    object_path_from_url,
    remove_interview,
)
from tests.fixtures.factories import (
    InMemoryStore,
    create_interview_record,
    create_summary_record,
)

MODULE = "app.services.review"


@pytest.fixture
def store():
    store = InMemoryStore()
    with store.installed():
        yield store


@pytest.fixture
def owner_id():
    return str(uuid4())


def test_object_path_from_url():
    """The bucket key is the owner folder plus the object name."""
    url = (
        "https://project.supabase.test/storage/v1/object/interview-audio/"
        "0b7c/1f2e-Jane%20Doe.txt"
    )

    assert object_path_from_url(url) == "0b7c/1f2e-Jane Doe.txt"


@pytest.mark.asyncio
async def test_list_interviews_passes_paging(owner_id):
    rows = [create_interview_record(user_id=owner_id)]
    with patch(
        f"{MODULE}.list_interviews_for_owner", new_callable=AsyncMock, return_value=rows
    ) as mock_list:
        result = await list_interviews(owner_id, limit=10, offset=20)

    assert result == rows
    mock_list.assert_awaited_once_with(owner_id, limit=10, offset=20)


@pytest.mark.asyncio
async def test_detail_returns_latest_summary(store, owner_id):
    """The UI shows the most recent summary when several exist."""
    interview = store.add_interview(create_interview_record(user_id=owner_id, status="completed"))
    interview_id = str(interview["id"])
    store.summaries.append(create_summary_record(interview_id=interview_id))
    latest = create_summary_record(interview_id=interview_id, transcript_text="second run")
    store.summaries.append(latest)

    detail = await get_interview_detail(owner_id, interview_id)

    assert detail["interview"]["id"] == interview["id"]
    assert detail["summary"] is latest


@pytest.mark.asyncio
async def test_detail_without_summary(store, owner_id):
    interview = store.add_interview(create_interview_record(user_id=owner_id))

    detail = await get_interview_detail(owner_id, str(interview["id"]))

    assert detail["summary"] is None


@pytest.mark.asyncio
async def test_detail_hides_foreign_interview(store, owner_id):
    """Absent and not-owned are indistinguishable."""
    foreign = store.add_interview(create_interview_record())

    with pytest.raises(NotFoundOrForbiddenError):
        await get_interview_detail(owner_id, str(foreign["id"]))
    with pytest.raises(NotFoundOrForbiddenError):
        await get_interview_detail(owner_id, str(uuid4()))


@pytest.mark.asyncio
async def test_summaries_for_owned_interview(store, owner_id):
    interview = store.add_interview(create_interview_record(user_id=owner_id))
    interview_id = str(interview["id"])
    summaries = [create_summary_record(interview_id=interview_id)]

    with patch(f"{MODULE}.list_summaries", new_callable=AsyncMock, return_value=summaries):
        result = await get_interview_summaries(owner_id, interview_id)

    assert result == summaries


@pytest.mark.asyncio
async def test_edit_transcript(store, owner_id):
    interview = store.add_interview(create_interview_record(user_id=owner_id))
    interview_id = str(interview["id"])

    with patch(
        f"{MODULE}.update_latest_transcript", new_callable=AsyncMock, return_value=True
    ) as mock_update:
        await edit_transcript(owner_id, interview_id, "Corrected transcript")

    mock_update.assert_awaited_once_with(interview_id, "Corrected transcript")


@pytest.mark.asyncio
async def test_edit_transcript_without_summary(store, owner_id):
    interview = store.add_interview(create_interview_record(user_id=owner_id))

    with patch(f"{MODULE}.update_latest_transcript", new_callable=AsyncMock, return_value=False):
        with pytest.raises(BadRequestError, match="no summary"):
            await edit_transcript(owner_id, str(interview["id"]), "text")


@pytest.mark.asyncio
async def test_remove_interview_deletes_object_and_audits(owner_id):
    interview_id = str(uuid4())
    interview = create_interview_record(
        user_id=owner_id,
        interview_id=interview_id,
        file_url=(
            "https://project.supabase.test/storage/v1/object/interview-audio/"
            f"{owner_id}/{interview_id}-transcript.txt"
        ),
    )

    with (
        patch(f"{MODULE}.get_interview_for_owner", new_callable=AsyncMock, return_value=interview),
        patch(f"{MODULE}.delete_interview", new_callable=AsyncMock, return_value=interview),
        patch(f"{MODULE}.supabase_client.remove_object", new_callable=AsyncMock) as mock_remove,
        patch(f"{MODULE}.log_audit", new_callable=AsyncMock) as mock_audit,
    ):
        await remove_interview(owner_id, interview_id)

    mock_remove.assert_awaited_once_with(f"{owner_id}/{interview_id}-transcript.txt")
    assert mock_audit.await_args.args == (
        owner_id,
        "interview_deleted",
        "interview",
        interview_id,
        {"file_name": "transcript.txt"},
    )


@pytest.mark.asyncio
async def test_remove_interview_keeps_row_when_storage_fails(owner_id):
    """A failed object removal leaves the row and writes no audit entry."""
    interview_id = str(uuid4())
    interview = create_interview_record(
        user_id=owner_id,
        interview_id=interview_id,
        file_url=(
            "https://project.supabase.test/storage/v1/object/interview-audio/"
            f"{owner_id}/{interview_id}-transcript.txt"
        ),
    )

    with (
        patch(f"{MODULE}.get_interview_for_owner", new_callable=AsyncMock, return_value=interview),
        patch(f"{MODULE}.delete_interview", new_callable=AsyncMock) as mock_delete,
        patch(
            f"{MODULE}.supabase_client.remove_object",
            new_callable=AsyncMock,
            side_effect=UpstreamError("Bad Gateway"),
        ),
        patch(f"{MODULE}.log_audit", new_callable=AsyncMock) as mock_audit,
    ):
        with pytest.raises(UpstreamError):
            await remove_interview(owner_id, interview_id)

    mock_delete.assert_not_called()
    mock_audit.assert_not_called()


@pytest.mark.asyncio
async def test_remove_interview_without_file(owner_id):
    interview = create_interview_record(user_id=owner_id)

    with (
        patch(f"{MODULE}.get_interview_for_owner", new_callable=AsyncMock, return_value=interview),
        patch(f"{MODULE}.delete_interview", new_callable=AsyncMock, return_value=interview),
        patch(f"{MODULE}.supabase_client.remove_object", new_callable=AsyncMock) as mock_remove,
        patch(f"{MODULE}.log_audit", new_callable=AsyncMock),
    ):
        await remove_interview(owner_id, str(interview["id"]))

    mock_remove.assert_not_called()


@pytest.mark.asyncio
async def test_remove_missing_interview(owner_id):
    with (
        patch(f"{MODULE}.get_interview_for_owner", new_callable=AsyncMock, return_value=None),
        patch(f"{MODULE}.delete_interview", new_callable=AsyncMock) as mock_delete,
        patch(f"{MODULE}.supabase_client.remove_object", new_callable=AsyncMock) as mock_remove,
        patch(f"{MODULE}.log_audit", new_callable=AsyncMock) as mock_audit,
    ):
        with pytest.raises(NotFoundOrForbiddenError):
            await remove_interview(owner_id, str(uuid4()))

    mock_remove.assert_not_called()
    mock_delete.assert_not_called()
    mock_audit.assert_not_called()
