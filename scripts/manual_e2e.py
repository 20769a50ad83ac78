#!/usr/bin/env python3
"""Manual E2E testing script for development.

Requires a running server and a valid Supabase access token.

Usage:
    python scripts/manual_e2e.py --token <jwt>                       # Interactive menu
    python scripts/manual_e2e.py --token <jwt> --scenario transcript # Run specific scenario
    python scripts/manual_e2e.py --token <jwt> --audio call.mp3      # Upload an audio file
    python scripts/manual_e2e.py --url https://staging.onrender.com  # Test against staging
    TEST_BASE_URL=... TEST_ACCESS_TOKEN=... python scripts/manual_e2e.py
"""

import argparse
import asyncio
import mimetypes
import os
from datetime import date
from pathlib import Path

import httpx

DEFAULT_BASE_URL = "http://localhost:8000"

SAMPLE_TRANSCRIPT = """\
Interviewer: Thanks for joining. Can you walk me through your last role?
Jane: I was a senior backend engineer on the payments platform. I owned the
billing migration from a legacy MySQL cluster to Postgres.
Interviewer: What was the hardest part?
Jane: Running both systems in parallel for six weeks without double charging anyone.
Interviewer: What are you looking for next?
Jane: A smaller team where I can own a product area end to end.
"""


def print_header(text: str):
    """Print section header."""
    print(f"\n{'=' * 60}")
    print(f"  {text}")
    print(f"{'=' * 60}\n")


def print_step(number: int, text: str):
    """Print step description."""
    print(f"\n[Step {number}] {text}")


def print_success(text: str):
    print(f"✓ {text}")


def print_error(text: str):
    print(f"✗ {text}")


async def check_health(client: httpx.AsyncClient):
    """Check application health."""
    try:
        response = await client.get("/health")
        if response.status_code == 200:
            data = response.json()
            print_success(f"Health check passed: {data.get('status')}")
            print(f"  Database: {data.get('database')}")
            print(f"  Pool: {data.get('pool')}")
            return True
        else:
            print_error(f"Health check failed: {response.status_code}")
            return False
    except httpx.HTTPError as e:
        print_error(f"Health check error: {e}")
        return False


def print_summary(summary: dict | None):
    if not summary:
        print_error("No summary stored")
        return
    for key, value in (summary.get("summary_content") or {}).items():
        print(f"  {key}: {str(value)[:120]}")


async def upload_file(
    client: httpx.AsyncClient,
    file_name: str,
    content: bytes,
    content_type: str,
    consent: bool = False,
) -> dict | None:
    """Upload through POST /interviews and report the outcome."""
    response = await client.post(
        "/interviews",
        files={"file": (file_name, content, content_type)},
        data={
            "candidate_name": "Jane Doe",
            "position_title": "Engineer",
            "interview_date": date.today().isoformat(),
            "consent_obtained": "true" if consent else "false",
        },
    )
    if response.status_code != 201:
        print_error(f"Upload failed: {response.status_code} {response.text}")
        return None

    data = response.json()
    interview = data["interview"]
    print_success(f"Interview {interview['id']} is {interview['status']}")
    if data.get("transcription"):
        print(f"  Transcription: {data['transcription'][:200]}")
    return data


async def scenario_transcript(base_url: str, token: str):
    """Test: text transcript upload -> completed with summary -> share link."""
    print_header("Scenario: Transcript Upload")

    headers = {"Authorization": f"Bearer {token}"}
    async with httpx.AsyncClient(base_url=base_url, headers=headers, timeout=120.0) as client:
        print_step(1, "Check application health")
        if not await check_health(client):
            return

        print_step(2, "Upload transcript.txt")
        data = await upload_file(
            client, "transcript.txt", SAMPLE_TRANSCRIPT.encode(), "text/plain"
        )
        if not data:
            return
        interview_id = data["interview"]["id"]

        print_step(3, "Fetch interview detail")
        detail = await client.get(f"/interviews/{interview_id}")
        print_summary(detail.json().get("summary"))

        print_step(4, "Create share link")
        link = await client.post(f"/interviews/{interview_id}/share-links", json={})
        if link.status_code != 201:
            print_error(f"Share link failed: {link.status_code} {link.text}")
            return
        access_token = link.json()["access_token"]
        print_success(f"Share link expires {link.json()['expires_at']}")

        print_step(5, "Read through share link without credentials")
        async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as public:
            shared = await public.get(f"/shared/{access_token}")
        if shared.status_code == 200:
            print_success(f"Shared read OK, permissions={shared.json()['permissions']}")
        else:
            print_error(f"Shared read failed: {shared.status_code}")


async def scenario_audio(base_url: str, token: str, audio_path: str):
    """Test: audio upload (with consent) -> transcription -> summary."""
    print_header(f"Scenario: Audio Upload ({audio_path})")

    path = Path(audio_path)
    content_type = mimetypes.guess_type(path.name)[0] or "audio/webm"

    headers = {"Authorization": f"Bearer {token}"}
    async with httpx.AsyncClient(base_url=base_url, headers=headers, timeout=300.0) as client:
        print_step(1, "Check application health")
        if not await check_health(client):
            return

        print_step(2, f"Upload {path.name} as {content_type}")
        data = await upload_file(client, path.name, path.read_bytes(), content_type, consent=True)
        if not data:
            return

        print_step(3, "Fetch interview detail")
        detail = await client.get(f"/interviews/{data['interview']['id']}")
        print_summary(detail.json().get("summary"))


async def scenario_unauthorized(base_url: str, token: str):
    """Test: handler call without credentials -> 401."""
    print_header("Scenario: Missing Credentials")

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        response = await client.post(
            "/process-interview", json={"interviewId": "x", "transcript": "hi"}
        )
    if response.status_code == 401:
        print_success(f"Rejected: {response.json()['error']}")
    else:
        print_error(f"Expected 401, got {response.status_code}")


async def check_health_only(base_url: str, token: str):
    """Just check health endpoint."""
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        await check_health(client)


async def interactive_menu(base_url: str, token: str):
    """Show interactive menu of scenarios."""
    print_header(f"E2E Testing - {base_url}")

    scenarios = {
        "1": ("Transcript upload", scenario_transcript),
        "2": ("Missing credentials", scenario_unauthorized),
        "3": ("Health check only", check_health_only),
    }

    while True:
        print("\nAvailable scenarios:")
        for key, (name, _) in scenarios.items():
            print(f"  {key}. {name}")
        print("  q. Quit")

        choice = input("\nSelect scenario (or 'q' to quit): ").strip()

        if choice.lower() == "q":
            print("Goodbye!")
            break

        if choice in scenarios:
            _, func = scenarios[choice]
            try:
                await func(base_url, token)
            except KeyboardInterrupt:
                print("\n\nInterrupted by user")
                break
            except httpx.HTTPError as e:
                print_error(f"Scenario failed: {e}")
        else:
            print_error("Invalid choice")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Manual E2E testing for RecruiterLab")
    parser.add_argument(
        "--scenario",
        choices=["transcript", "unauthorized", "health"],
        help="Run specific scenario",
    )
    parser.add_argument("--audio", help="Path to an audio file to upload")
    parser.add_argument(
        "--url",
        help=f"Base URL for testing (default: $TEST_BASE_URL or {DEFAULT_BASE_URL})",
    )
    parser.add_argument("--token", help="Supabase access token (default: $TEST_ACCESS_TOKEN)")

    args = parser.parse_args()

    # CLI arg > env var > default
    base_url = args.url or os.getenv("TEST_BASE_URL") or DEFAULT_BASE_URL
    token = args.token or os.getenv("TEST_ACCESS_TOKEN") or ""

    if args.audio:
        asyncio.run(scenario_audio(base_url, token, args.audio))
    elif args.scenario:
        scenario_map = {
            "transcript": scenario_transcript,
            "unauthorized": scenario_unauthorized,
            "health": check_health_only,
        }
        asyncio.run(scenario_map[args.scenario](base_url, token))
    else:
        asyncio.run(interactive_menu(base_url, token))


if __name__ == "__main__":
    main()
