"""
HTTP client for the Interview Coach API.

Used by the conversation orchestrator to open token streams and to request
complete (non-streaming) generations.
"""

import logging
from typing import AsyncIterator, Callable

import httpx

from interview_coach.core.stream_consumer import (
    CancellationToken,
    StreamConsumer,
    StreamOpenError,
)
from interview_coach.models.generation import AIModel

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Raised when a non-streaming API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_text(response: httpx.Response) -> str:
    """Extract the server's error message from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("details") or body.get("error") or body)
    return str(body)


class InterviewApiClient:
    """Async client for ``/api/chat`` and ``/api/chat-stream``."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 90.0,
    ):
        self.client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    def _request_body(self, prompt: str, model: AIModel) -> dict[str, str]:
        return {"message": prompt, "aiModel": model.value}

    async def _stream_body(self, prompt: str, model: AIModel) -> AsyncIterator[bytes]:
        async with self.client.stream(
            "POST",
            "/api/chat-stream",
            json=self._request_body(prompt, model),
        ) as response:
            if response.status_code >= 400:
                await response.aread()
                raise StreamOpenError(
                    f"HTTP error! status: {response.status_code} ({_error_text(response)})"
                )

            async for chunk in response.aiter_bytes():
                yield chunk

    def open_stream(
        self,
        prompt: str,
        model: AIModel = AIModel.SMART,
        token: CancellationToken | None = None,
        on_update: Callable[[str], None] | None = None,
    ) -> StreamConsumer:
        """
        Prepare a streaming generation.

        The request is sent when the returned consumer is first iterated.
        """
        return StreamConsumer(
            self._stream_body(prompt, model),
            token=token,
            on_update=on_update,
        )

    async def complete(self, prompt: str, model: AIModel = AIModel.SMART) -> str:
        """
        Request a complete generation.

        Raises:
            ApiClientError: On transport failure or an error response
        """
        try:
            response = await self.client.post(
                "/api/chat",
                json=self._request_body(prompt, model),
            )
        except httpx.HTTPError as e:
            logger.error(f"Chat request failed: {e}")
            raise ApiClientError(f"Request failed: {e}") from e

        if response.status_code >= 400:
            raise ApiClientError(_error_text(response), status_code=response.status_code)

        return response.json().get("response", "")
