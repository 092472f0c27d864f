"""
Generation Backend for Interview Coach

Thin client around the Gemini REST API:
- Complete text generation (non-streaming)
- Incremental generation as a lazy sequence of text fragments

A single instance wraps one httpx.AsyncClient and is shared by all
in-flight requests.
"""

import json
import logging
from typing import Any, AsyncIterator

import httpx

from interview_coach.config.settings import Settings, get_settings
from interview_coach.models.generation import ErrorCategory

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Raised when the upstream model call fails."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.GENERIC,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.status_code = status_code

    @property
    def user_message(self) -> str:
        return self.category.user_message


def classify_error(status_code: int | None, detail: str = "") -> ErrorCategory:
    """Map an upstream status code and error text to an error category."""
    text = detail.upper()
    if status_code in (401, 403) or "API_KEY_INVALID" in text or "API KEY NOT VALID" in text:
        return ErrorCategory.CREDENTIALS
    if status_code == 429 or "RESOURCE_EXHAUSTED" in text or "QUOTA" in text:
        return ErrorCategory.QUOTA
    return ErrorCategory.GENERIC


class GenerationBackend:
    """
    Gemini model access over HTTP.

    The underlying httpx.AsyncClient is safe for concurrent use, so one
    backend serves every relay request in the process.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize backend with Gemini configuration."""
        self.settings = settings or get_settings()
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.gemini_base_url.rstrip("/"),
            headers={
                "x-goog-api-key": self.settings.gemini_api_key,
                "Content-Type": "application/json",
            },
            timeout=self.settings.generation_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        """Whether credentials are available for upstream calls."""
        return bool(self.settings.gemini_api_key.strip())

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    # =========================================================================
    # RESPONSE PARSING
    # =========================================================================

    def _extract_text(self, result: dict[str, Any]) -> str:
        """Extract text from a generateContent response, joining all parts."""
        candidates = result.get("candidates") or []
        if not candidates:
            return ""

        parts = (candidates[0].get("content") or {}).get("parts") or []
        text_parts = []
        for part in parts:
            if isinstance(part, dict) and isinstance(part.get("text"), str):
                text_parts.append(part["text"])
        return "".join(text_parts)

    def _error_from_payload(self, error: Any, status_code: int | None = None) -> GenerationError:
        """Build a GenerationError from a Gemini error object."""
        if isinstance(error, dict):
            status_code = status_code or error.get("code")
            detail = f"{error.get('status', '')} {error.get('message', '')}".strip()
        else:
            detail = str(error)
        category = classify_error(status_code, detail)
        return GenerationError(
            detail or f"Upstream error {status_code}",
            category=category,
            status_code=status_code,
        )

    def _error_from_response(self, response: httpx.Response) -> GenerationError:
        try:
            body = response.json()
        except ValueError:
            return GenerationError(
                f"Gemini API error {response.status_code}: {response.text[:200]}",
                category=classify_error(response.status_code, response.text),
                status_code=response.status_code,
            )
        error = body.get("error", body) if isinstance(body, dict) else body
        return self._error_from_payload(error, response.status_code)

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]}
            ],
        }

    # =========================================================================
    # GENERATION
    # =========================================================================

    async def generate(self, prompt: str, model: str) -> str:
        """
        Generate a complete response.

        Args:
            prompt: Prompt text
            model: Backend model identifier

        Returns:
            Generated text

        Raises:
            GenerationError: If the upstream call fails
        """
        try:
            response = await self.client.post(
                f"/models/{model}:generateContent",
                json=self._build_payload(prompt),
            )
        except httpx.HTTPError as e:
            logger.error(f"Gemini API transport error: {e}")
            raise GenerationError(f"Transport error: {e}") from e

        if response.status_code >= 400:
            error = self._error_from_response(response)
            logger.error(f"Gemini API error ({error.category.value}): {error.message}")
            raise error

        text = self._extract_text(response.json())
        logger.info(f"Generated response length: {len(text)}")
        return text

    async def stream(self, prompt: str, model: str) -> AsyncIterator[str]:
        """
        Generate a response incrementally.

        Yields non-empty text fragments in the order the model produced them.

        Raises:
            GenerationError: If the upstream call fails at any point
        """
        try:
            async with self.client.stream(
                "POST",
                f"/models/{model}:streamGenerateContent",
                params={"alt": "sse"},
                json=self._build_payload(prompt),
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise self._error_from_response(response)

                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    data = line[len("data:"):].strip()
                    if not data:
                        continue

                    try:
                        chunk = json.loads(data)
                    except json.JSONDecodeError:
                        logger.warning(f"Skipping unparseable upstream chunk: {data[:80]!r}")
                        continue

                    if isinstance(chunk, dict) and "error" in chunk:
                        raise self._error_from_payload(chunk["error"])

                    text = self._extract_text(chunk) if isinstance(chunk, dict) else ""
                    if text:
                        yield text

        except httpx.HTTPError as e:
            logger.error(f"Gemini stream transport error: {e}")
            raise GenerationError(f"Transport error: {e}") from e
