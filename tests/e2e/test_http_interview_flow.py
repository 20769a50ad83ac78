"""E2E HTTP tests for upload, review and sharing against a real database."""

import json
from uuid import uuid4

import pytest

from tests.fixtures.factories import create_summary_content

TRANSCRIPT = b"Interviewer: What are you looking for?\nJane: A team that ships weekly."


async def upload_transcript(http_client, auth_headers, **form):
    data = {"candidate_name": "Jane Doe", "position_title": "Engineer", **form}
    return await http_client.post(
        "/interviews",
        files={"file": ("transcript.txt", TRANSCRIPT, "text/plain")},
        data=data,
        headers=auth_headers,
    )


@pytest.fixture
def summary_reply(mock_openai):
    mock_openai["chat_completion"].return_value = {
        "content": json.dumps(create_summary_content()),
        "model": "gpt-4o-mini-2024-07-18",
    }
    return mock_openai


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_upload_transcript_completes(
    http_client, auth_headers, auth_user_id, mock_supabase, summary_reply
):
    """Real HTTP upload -> stored object -> completed interview with one summary."""
    response = await upload_transcript(http_client, auth_headers)

    assert response.status_code == 201
    assert "X-Request-ID" in response.headers
    interview = response.json()["interview"]
    assert interview["status"] == "completed"
    assert interview["version"] == 3

    [path] = mock_supabase
    assert path == f"{auth_user_id}/{interview['id']}-transcript.txt"
    assert mock_supabase[path] == TRANSCRIPT

    detail = await http_client.get(f"/interviews/{interview['id']}", headers=auth_headers)
    assert detail.status_code == 200
    summary = detail.json()["summary"]
    assert summary["summary_content"]["jobSummary"]
    assert summary["transcript_text"] == TRANSCRIPT.decode()

    listing = await http_client.get("/interviews", headers=auth_headers)
    assert listing.json()["count"] == 1

    summary_reply["transcribe"].assert_not_called()


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_process_interview_handler_twice(
    http_client, auth_headers, mock_supabase, summary_reply
):
    """Re-running analysis adds a second summary; detail shows the newest."""
    interview_id = (await upload_transcript(http_client, auth_headers)).json()["interview"]["id"]
    summary_reply["chat_completion"].return_value = {
        "content": json.dumps(create_summary_content(jobSummary="Rerun")),
        "model": "gpt-4o-mini-2024-07-18",
    }

    response = await http_client.post(
        "/process-interview",
        json={"interviewId": interview_id, "transcript": TRANSCRIPT.decode()},
        headers=auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["summary"]["jobSummary"] == "Rerun"

    summaries = await http_client.get(
        f"/interviews/{interview_id}/summaries", headers=auth_headers
    )
    assert summaries.json()["count"] == 2

    detail = await http_client.get(f"/interviews/{interview_id}", headers=auth_headers)
    assert detail.json()["summary"]["id"] == response.json()["summaryId"]


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_other_user_cannot_see_interview(
    http_client, auth_headers, mock_supabase, summary_reply, sample_interview
):
    """An interview owned by someone else is indistinguishable from a missing one."""
    response = await http_client.get(
        f"/interviews/{sample_interview['interview_id']}", headers=auth_headers
    )

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND_OR_FORBIDDEN"


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_share_link_public_read(http_client, auth_headers, mock_supabase, summary_reply):
    interview_id = (await upload_transcript(http_client, auth_headers)).json()["interview"]["id"]

    created = await http_client.post(
        f"/interviews/{interview_id}/share-links",
        json={"expires_in_days": 2, "permissions": ["view", "comment"]},
        headers=auth_headers,
    )
    assert created.status_code == 201
    token = created.json()["access_token"]

    shared = await http_client.get(f"/shared/{token}")
    assert shared.status_code == 200
    data = shared.json()
    assert data["interview"]["candidate_name"] == "Jane Doe"
    assert "user_id" not in data["interview"]
    assert data["permissions"] == ["view", "comment"]
    assert data["summary"]["summary_content"]["jobSummary"]

    link_id = created.json()["id"]
    revoked = await http_client.delete(
        f"/interviews/{interview_id}/share-links/{link_id}", headers=auth_headers
    )
    assert revoked.status_code == 204
    assert (await http_client.get(f"/shared/{token}")).status_code == 404


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_edit_transcript_and_delete(
    http_client, auth_headers, mock_supabase, summary_reply, clean_db
):
    interview_id = (await upload_transcript(http_client, auth_headers)).json()["interview"]["id"]

    edited = await http_client.patch(
        f"/interviews/{interview_id}/transcript",
        json={"transcript_text": "Corrected"},
        headers=auth_headers,
    )
    assert edited.status_code == 200
    detail = await http_client.get(f"/interviews/{interview_id}", headers=auth_headers)
    assert detail.json()["summary"]["transcript_text"] == "Corrected"

    deleted = await http_client.delete(f"/interviews/{interview_id}", headers=auth_headers)
    assert deleted.status_code == 204

    async with clean_db.acquire() as conn:
        assert await conn.fetchval("SELECT COUNT(*) FROM interview_summaries") == 0
        assert await conn.fetchval("SELECT COUNT(*) FROM audit_logs") == 1

    missing = await http_client.get(f"/interviews/{interview_id}", headers=auth_headers)
    assert missing.status_code == 404


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_missing_credentials_rejected(http_client):
    response = await http_client.post(
        "/process-interview", json={"interviewId": str(uuid4()), "transcript": "Hi"}
    )

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["code"] == "UNAUTHORIZED"
