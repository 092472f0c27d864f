"""
Stream Relay - bridges backend token generation to the wire protocol.

Runs once per incoming HTTP request. Every backend fragment becomes one
``data:`` frame; the stream always ends with exactly one ``done`` or
``error`` frame.
"""

import logging
from typing import Any, AsyncIterator

from interview_coach.config.settings import Settings, get_settings
from interview_coach.core.generation import GenerationBackend, GenerationError
from interview_coach.models.generation import AIModel, ErrorCategory
from interview_coach.models.stream import (
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    TokenEvent,
    encode_frame,
)

logger = logging.getLogger(__name__)


class PromptValidationError(ValueError):
    """Raised when a prompt is missing, empty or oversized."""
    pass


class BackendNotConfiguredError(RuntimeError):
    """Raised when no backend credentials are available."""
    pass


class StreamRelay:
    """
    Converts a backend fragment stream into protocol frames.

    Relays for different requests share nothing but the injected backend.
    """

    def __init__(self, backend: GenerationBackend, settings: Settings | None = None):
        self.backend = backend
        self.settings = settings or get_settings()

    # =========================================================================
    # PRE-FLIGHT CHECKS
    # =========================================================================

    def validate_prompt(self, prompt: Any) -> str:
        """
        Check the prompt before any backend work.

        Raises:
            PromptValidationError: If the prompt is missing, empty or too long
        """
        if prompt is None or (isinstance(prompt, str) and not prompt.strip()):
            raise PromptValidationError("Bericht is vereist")

        max_chars = self.settings.max_prompt_chars
        if not isinstance(prompt, str) or len(prompt) > max_chars:
            raise PromptValidationError(
                f"Bericht moet een string zijn van maximaal {max_chars:,} karakters".replace(",", ".")
            )
        return prompt

    def ensure_configured(self) -> None:
        """
        Raises:
            BackendNotConfiguredError: If credentials are missing
        """
        if not self.backend.is_configured:
            logger.error("GEMINI_API_KEY not found in environment variables")
            raise BackendNotConfiguredError("API configuratie ontbreekt. Check Environment Variables.")

    def resolve_model(self, model: AIModel) -> str:
        model_name = model.resolve(self.settings)
        logger.info(f"Using model: {model_name}")
        return model_name

    # =========================================================================
    # RELAYING
    # =========================================================================

    async def events(self, prompt: str, model: AIModel = AIModel.SMART) -> AsyncIterator[StreamEvent]:
        """
        Drive the backend in streaming mode and yield protocol events.

        Fragments are passed through one-to-one. Any backend exception ends
        the sequence with a single ErrorEvent instead of a DoneEvent.
        """
        upstream = self.backend.stream(prompt, self.resolve_model(model))
        tokens = 0

        try:
            try:
                async for fragment in upstream:
                    if not fragment:
                        continue
                    tokens += 1
                    yield TokenEvent(text=fragment)
            except GenerationError as e:
                logger.error(f"Streaming error ({e.category.value}) after {tokens} tokens: {e.message}")
                yield ErrorEvent(message=e.user_message)
                return
            except Exception as e:
                logger.exception(f"Unexpected streaming error after {tokens} tokens: {e}")
                yield ErrorEvent(message=ErrorCategory.GENERIC.user_message)
                return

            logger.info(f"Stream completed successfully ({tokens} tokens)")
            yield DoneEvent()
        finally:
            await upstream.aclose()

    async def frames(self, prompt: str, model: AIModel = AIModel.SMART) -> AsyncIterator[bytes]:
        """
        Encoded frames for an HTTP response body.

        If the peer goes away the response closes this generator; emission
        stops and the upstream stream is released without raising.
        """
        events = self.events(prompt, model)
        finished = False

        try:
            async for event in events:
                yield encode_frame(event)
            finished = True
        finally:
            if not finished:
                logger.info("Peer closed connection, stopping stream")
            await events.aclose()

    async def complete(self, prompt: str, model: AIModel = AIModel.SMART) -> str:
        """
        Non-streaming generation.

        Raises:
            GenerationError: If the backend call fails
        """
        return await self.backend.generate(prompt, self.resolve_model(model))
