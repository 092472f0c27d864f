"""
Stream Consumer - rebuilds protocol events from a chunked byte stream.

A protocol frame may arrive split over any number of network chunks, and a
chunk may hold several frames. The consumer keeps a single text buffer,
extracts every complete newline-terminated record and leaves the trailing
partial record for the next chunk.

States:
    IDLE → AWAITING_FIRST_BYTE → STREAMING → (COMPLETED | FAILED | CANCELLED)
"""

import asyncio
import codecs
import logging
from typing import AsyncIterator, Callable, Iterator

from interview_coach.models.stream import (
    DoneEvent,
    ErrorEvent,
    FrameDecodeError,
    RECORD_DELIMITER,
    StreamEvent,
    StreamResult,
    StreamState,
    TokenEvent,
    decode_payload,
)

logger = logging.getLogger(__name__)

DATA_FIELD = "data:"


class StreamStateError(RuntimeError):
    """Raised when an invalid stream state transition is attempted."""
    pass


class StreamOpenError(Exception):
    """Raised by a byte source that could not be opened (e.g. non-2xx status)."""
    pass


class CancellationToken:
    """One-shot cancellation signal tied to a single generation request."""

    def __init__(self):
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        await self._event.wait()


class _Cancelled(Exception):
    pass


class StreamConsumer:
    """
    Consumes one event stream.

    Not seekable or resumable: to retry, open a new byte source and build a
    new consumer.
    """

    VALID_TRANSITIONS: dict[StreamState, list[StreamState]] = {
        StreamState.IDLE: [StreamState.AWAITING_FIRST_BYTE],
        StreamState.AWAITING_FIRST_BYTE: [
            StreamState.STREAMING,
            StreamState.FAILED,
            StreamState.CANCELLED,
        ],
        StreamState.STREAMING: [
            StreamState.COMPLETED,
            StreamState.FAILED,
            StreamState.CANCELLED,
        ],
        StreamState.COMPLETED: [],  # Terminal state
        StreamState.FAILED: [],  # Terminal state
        StreamState.CANCELLED: [],  # Terminal state
    }

    def __init__(
        self,
        source: AsyncIterator[bytes],
        token: CancellationToken | None = None,
        on_update: Callable[[str], None] | None = None,
    ):
        """
        Args:
            source: Async iterator of raw byte chunks (e.g. an HTTP body)
            token: Cancellation signal for this request
            on_update: Called with the accumulated text after every token
        """
        self._source = source
        self.token = token or CancellationToken()
        self.on_update = on_update

        self.state = StreamState.IDLE
        self.full_text = ""
        self.error_message: str | None = None

        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def result(self) -> StreamResult:
        return StreamResult(
            state=self.state,
            text=self.full_text,
            error_message=self.error_message,
        )

    # =========================================================================
    # STATE MACHINE
    # =========================================================================

    def _transition(self, new_state: StreamState) -> None:
        valid_next_states = self.VALID_TRANSITIONS.get(self.state, [])
        if new_state not in valid_next_states:
            raise StreamStateError(
                f"Invalid transition from {self.state.value} to {new_state.value}"
            )
        self.state = new_state

    def _fail(self, message: str) -> None:
        self.error_message = message
        self._transition(StreamState.FAILED)

    # =========================================================================
    # PARSING
    # =========================================================================

    def feed(self, chunk: bytes, final: bool = False) -> Iterator[StreamEvent]:
        """
        Append a chunk and decode every complete record it finishes.

        With ``final`` set, a trailing record without a terminator is parsed
        as well.
        """
        self._buffer += self._decoder.decode(chunk, final=final)

        while RECORD_DELIMITER in self._buffer:
            record, self._buffer = self._buffer.split(RECORD_DELIMITER, 1)
            event = self._parse_record(record)
            if event is not None:
                yield event

        if final and self._buffer:
            record, self._buffer = self._buffer, ""
            event = self._parse_record(record)
            if event is not None:
                yield event

    def _parse_record(self, record: str) -> StreamEvent | None:
        record = record.rstrip("\r")
        if not record.startswith(DATA_FIELD):
            # Blank separators and ": keep-alive" comments
            return None

        payload = record[len(DATA_FIELD):]
        if payload.startswith(" "):
            payload = payload[1:]

        try:
            return decode_payload(payload)
        except FrameDecodeError as e:
            logger.warning(f"Error parsing streaming data: {e}")
            return None

    # =========================================================================
    # READING
    # =========================================================================

    async def _read(self, iterator: AsyncIterator[bytes]) -> bytes | None:
        try:
            return await iterator.__anext__()
        except StopAsyncIteration:
            return None

    async def _next_chunk(self, iterator: AsyncIterator[bytes]) -> bytes | None:
        """Wait for the next chunk or cancellation, whichever comes first."""
        if self.token.cancelled:
            raise _Cancelled()

        read = asyncio.ensure_future(self._read(iterator))
        cancelled = asyncio.ensure_future(self.token.wait())
        try:
            done, _ = await asyncio.wait(
                {read, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            read.cancel()
            raise
        finally:
            cancelled.cancel()

        if read in done:
            return read.result()

        read.cancel()
        await asyncio.gather(read, return_exceptions=True)
        raise _Cancelled()

    async def _close_source(self) -> None:
        aclose = getattr(self._source, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            logger.debug(f"Error while releasing byte source: {e}")

    async def events(self) -> AsyncIterator[StreamEvent]:
        """
        Yield decoded events in order until a terminal event.

        The final state is available on ``state`` / ``result`` once the
        iterator is exhausted.
        """
        self._transition(StreamState.AWAITING_FIRST_BYTE)

        try:
            while True:
                try:
                    chunk = await self._next_chunk(self._source)
                except _Cancelled:
                    logger.info("Stream cancelled by caller")
                    self._transition(StreamState.CANCELLED)
                    return
                except StreamOpenError as e:
                    logger.error(f"Could not open stream: {e}")
                    self._fail(str(e))
                    return
                except Exception as e:
                    if self.token.cancelled:
                        self._transition(StreamState.CANCELLED)
                    else:
                        logger.error(f"Stream transport error: {e}")
                        self._fail(f"Verbinding verbroken: {e}")
                    return

                final = chunk is None
                for event in self.feed(chunk or b"", final=final):
                    if self.token.cancelled:
                        self._transition(StreamState.CANCELLED)
                        return

                    if self.state is StreamState.AWAITING_FIRST_BYTE:
                        self._transition(StreamState.STREAMING)

                    if isinstance(event, ErrorEvent):
                        self._fail(event.message)
                        yield event
                        return

                    if isinstance(event, DoneEvent):
                        self._transition(StreamState.COMPLETED)
                        yield event
                        return

                    if isinstance(event, TokenEvent):
                        self.full_text += event.text
                        if self.on_update:
                            self.on_update(self.full_text)
                        yield event

                if final:
                    logger.warning("Stream ended without a completion marker")
                    self._fail("Stream ended before completion")
                    return
        finally:
            await self._close_source()

    async def run(self) -> StreamResult:
        """Drain the stream and return its outcome."""
        async for _ in self.events():
            pass
        return self.result

    def cancel(self) -> None:
        self.token.cancel()
