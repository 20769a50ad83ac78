"""Supabase client for token verification and object storage."""

from __future__ import annotations

from typing import Any, cast
from urllib.parse import quote

import aiohttp
from structlog import get_logger

from app.core.config import settings
from app.core.errors import UpstreamError
from app.types.external import AuthUserTD

logger = get_logger()


class SupabaseClient:
    """HTTP client for the Supabase Auth and Storage REST APIs.

    Uses the service-role key for storage. Auth lookups forward the caller's
    own access token so Supabase validates it.
    """

    def __init__(self) -> None:
        """Initialize client from settings."""
        self.base_url = settings.supabase_url
        self.service_key = settings.supabase_service_role_key
        self.bucket = settings.storage_bucket
        self.timeout = aiohttp.ClientTimeout(total=settings.http_timeout_seconds)

    def _service_headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }

    def _object_endpoint(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"

    async def get_user(self, access_token: str) -> AuthUserTD | None:
        """
        Resolve an access token to its user.

        Args:
            access_token: Caller's JWT (without the "Bearer " prefix)

        Returns:
            User record, or None if Supabase rejects the token

        Raises:
            UpstreamError: If the auth service itself fails
        """
        url = f"{self.base_url}/auth/v1/user"
        headers = {
            "apikey": self.service_key,
            "Authorization": f"Bearer {access_token}",
        }

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url, headers=headers) as response:
                if response.status in (401, 403):
                    logger.info("supabase_token_rejected", status=response.status)
                    return None

                if not response.ok:
                    body = await response.text()
                    logger.error("supabase_auth_error", status=response.status, body=body[:200])
                    raise UpstreamError(
                        f"Supabase auth error: {body or response.reason}",
                        service="supabase",
                        context={"status": response.status},
                    )

                data: dict[str, Any] = await response.json()

        if not data.get("id"):
            return None

        return cast(AuthUserTD, data)

    def object_url(self, path: str) -> str:
        """URL of a stored object (authenticated access)."""
        return self._object_endpoint(path)

    async def upload_object(self, path: str, data: bytes, content_type: str) -> str:
        """
        Store bytes in the interview bucket.

        Args:
            path: Object key (``{ownerId}/{interviewId}-{filename}``)
            data: File contents
            content_type: MIME type recorded with the object

        Returns:
            Object URL

        Raises:
            UpstreamError: On non-success response
        """
        headers = {
            **self._service_headers(),
            "Content-Type": content_type,
            "x-upsert": "false",
        }

        logger.info("storage_upload_started", path=path, size=len(data))

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(
                self._object_endpoint(path), data=data, headers=headers
            ) as response:
                if not response.ok:
                    body = await response.text()
                    logger.error("storage_upload_failed", path=path, status=response.status)
                    raise UpstreamError(
                        f"Storage upload failed: {body or response.reason}",
                        service="supabase",
                        context={"status": response.status, "path": path},
                    )

        logger.info("storage_upload_completed", path=path)
        return self.object_url(path)

    async def remove_object(self, path: str) -> None:
        """
        Delete a stored object. A missing object is not an error.

        Raises:
            UpstreamError: On non-success response other than 404
        """
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.delete(
                self._object_endpoint(path), headers=self._service_headers()
            ) as response:
                if response.status == 404:
                    logger.info("storage_object_already_gone", path=path)
                    return

                if not response.ok:
                    body = await response.text()
                    raise UpstreamError(
                        f"Storage delete failed: {body or response.reason}",
                        service="supabase",
                        context={"status": response.status, "path": path},
                    )

        logger.info("storage_object_removed", path=path)


# Module-level singleton
supabase_client = SupabaseClient()
