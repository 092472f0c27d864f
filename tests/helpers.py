"""Test doubles and wire helpers shared across the test suite."""

import asyncio
from typing import AsyncIterator, Iterable

from interview_coach.core.api_client import ApiClientError
from interview_coach.core.stream_consumer import StreamConsumer
from interview_coach.models.generation import AIModel
from interview_coach.models.stream import DoneEvent, ErrorEvent, TokenEvent, encode_frame


class ScriptedBackend:
    """Stand-in for GenerationBackend that replays fixed fragments."""

    def __init__(
        self,
        fragments: Iterable[str] = (),
        error: Exception | None = None,
        text: str = "",
        configured: bool = True,
    ):
        self.fragments = list(fragments)
        self.error = error
        self.text = text
        self.configured = configured
        self.calls: list[tuple[str, str]] = []
        self.stream_closed = False

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def stream(self, prompt: str, model: str) -> AsyncIterator[str]:
        self.calls.append((prompt, model))
        try:
            for fragment in self.fragments:
                await asyncio.sleep(0)
                yield fragment
            if self.error is not None:
                raise self.error
        finally:
            self.stream_closed = True

    async def generate(self, prompt: str, model: str) -> str:
        self.calls.append((prompt, model))
        if self.error is not None:
            raise self.error
        return self.text

    async def close(self):
        pass


async def chunked(data: bytes, size: int = 0) -> AsyncIterator[bytes]:
    """Yield ``data`` in ``size``-byte chunks (a single chunk when size is 0)."""
    if size <= 0:
        yield data
        return
    for start in range(0, len(data), size):
        await asyncio.sleep(0)
        yield data[start:start + size]


def stream_bytes(*fragments: str, error: str | None = None) -> bytes:
    """Wire bytes for a stream of tokens ending in done or error."""
    body = b"".join(encode_frame(TokenEvent(text=fragment)) for fragment in fragments)
    terminal = ErrorEvent(message=error) if error is not None else DoneEvent()
    return body + encode_frame(terminal)


class FakeApiClient:
    """
    Orchestrator collaborator serving scripted streams.

    Each queued script is either wire bytes or an asyncio.Event gate
    followed by bytes (the stream blocks until the gate is set).
    """

    def __init__(self):
        self.scripts: list[tuple[bytes, asyncio.Event | None]] = []
        self.prompts: list[str] = []
        self.models: list[AIModel] = []
        self.feedback_text = "Goed gedaan!"
        self.feedback_error: str | None = None
        self.complete_prompts: list[str] = []

    def queue(self, data: bytes, gate: asyncio.Event | None = None) -> None:
        self.scripts.append((data, gate))

    def queue_reply(self, *fragments: str) -> None:
        self.queue(stream_bytes(*fragments))

    async def _source(self, data: bytes, gate: asyncio.Event | None) -> AsyncIterator[bytes]:
        if gate is not None:
            # Deliver everything up to the terminal frame, then wait
            head, tail = data.rsplit(b"data: ", 1)
            yield head
            await gate.wait()
            yield b"data: " + tail
            return
        async for chunk in chunked(data, size=7):
            yield chunk

    def open_stream(self, prompt, model=AIModel.SMART, token=None, on_update=None) -> StreamConsumer:
        self.prompts.append(prompt)
        self.models.append(model)
        data, gate = self.scripts.pop(0) if self.scripts else (stream_bytes("Volgende vraag?"), None)
        return StreamConsumer(self._source(data, gate), token=token, on_update=on_update)

    async def complete(self, prompt, model=AIModel.SMART) -> str:
        self.complete_prompts.append(prompt)
        if self.feedback_error is not None:
            raise ApiClientError(self.feedback_error, status_code=500)
        return self.feedback_text



