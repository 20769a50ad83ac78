"""OpenAI API client for speech-to-text and chat completions."""

from __future__ import annotations

from typing import Any

import aiohttp
from structlog import get_logger

from app.core.config import settings
from app.core.errors import UpstreamError
from app.types.external import ChatCompletionTD

logger = get_logger()


class OpenAIClient:
    """HTTP client for the OpenAI REST API with bearer auth.

    The API key is injected from settings at construction time.
    """

    def __init__(self, api_key: str | None = None, base_url: str | None = None) -> None:
        self.api_key = api_key or settings.openai_api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=settings.http_timeout_seconds)
        self.headers = {"Authorization": f"Bearer {self.api_key}"}

    async def transcribe(
        self,
        audio: bytes,
        file_name: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> str:
        """
        Transcribe audio to plain text.

        Args:
            audio: Raw audio bytes
            file_name: File name sent with the multipart part (format hint)
            content_type: MIME type of the part

        Returns:
            Transcript text (may be empty)

        Raises:
            UpstreamError: On non-success response, carrying the error body
        """
        form = aiohttp.FormData()
        form.add_field("file", audio, filename=file_name, content_type=content_type)
        form.add_field("model", settings.transcription_model)
        form.add_field("language", settings.transcription_language)
        form.add_field("response_format", "text")

        logger.info("openai_transcription_request", size=len(audio), file_name=file_name)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(
                f"{self.base_url}/audio/transcriptions", data=form, headers=self.headers
            ) as response:
                body = await response.text()

                if not response.ok:
                    logger.error(
                        "openai_transcription_error", status=response.status, body=body[:500]
                    )
                    raise UpstreamError(
                        f"OpenAI API error: {body}",
                        service="openai",
                        context={"status": response.status},
                    )

        logger.info("openai_transcription_received", length=len(body))
        return body

    async def chat_completion(
        self,
        system_prompt: str,
        user_content: str,
        model: str | None = None,
    ) -> ChatCompletionTD:
        """
        Run a single chat completion.

        Args:
            system_prompt: System message
            user_content: User message
            model: Model override (defaults to settings.analysis_model)

        Returns:
            Message content and the model that produced it

        Raises:
            UpstreamError: On non-success response or malformed payload
        """
        model_name = model or settings.analysis_model
        payload: dict[str, Any] = {
            "model": model_name,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": settings.analysis_temperature,
            "max_tokens": settings.analysis_max_tokens,
        }

        logger.info("openai_chat_request", model=model_name, prompt_chars=len(user_content))

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(
                f"{self.base_url}/chat/completions", json=payload, headers=self.headers
            ) as response:
                if not response.ok:
                    body = await response.text()
                    logger.error("openai_chat_error", status=response.status, body=body[:500])
                    raise UpstreamError(
                        f"OpenAI API error: {response.reason}",
                        service="openai",
                        context={"status": response.status, "body": body[:500]},
                    )

                data: dict[str, Any] = await response.json()

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise UpstreamError(
                "OpenAI API returned no completion choices", service="openai"
            ) from e

        return {"content": content or "", "model": data.get("model") or model_name}


# Module-level singleton
openai_client = OpenAIClient()
