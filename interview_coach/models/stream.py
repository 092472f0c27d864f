"""
Streaming protocol models for Interview Coach

Wire format: newline-terminated records, each either a comment / keep-alive
(ignored) or ``data: <json>`` carrying one of

    {"token": "...", "timestamp": "..."}
    {"done": true}
    {"error": true, "message": "..."}

A stream always ends with exactly one ``done`` or ``error`` payload.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Union

from pydantic import BaseModel

FRAME_PREFIX = "data: "
RECORD_DELIMITER = "\n"


class FrameDecodeError(ValueError):
    """Raised when a data record does not hold a recognised payload."""
    pass


class TokenEvent(BaseModel):
    """A fragment of interviewer text, concatenated in arrival order."""
    type: Literal["token"] = "token"
    text: str


class DoneEvent(BaseModel):
    """Terminal success marker."""
    type: Literal["done"] = "done"


class ErrorEvent(BaseModel):
    """Terminal failure marker."""
    type: Literal["error"] = "error"
    message: str


StreamEvent = Union[TokenEvent, DoneEvent, ErrorEvent]


class StreamState(str, Enum):
    """Lifecycle of one in-flight generation request on the client."""

    IDLE = "idle"
    AWAITING_FIRST_BYTE = "awaiting_first_byte"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (StreamState.COMPLETED, StreamState.FAILED, StreamState.CANCELLED)


class StreamResult(BaseModel):
    """Outcome of draining one stream."""

    state: StreamState
    text: str = ""
    error_message: str | None = None


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (DoneEvent, ErrorEvent))


def event_payload(event: StreamEvent) -> dict[str, Any]:
    """Build the JSON payload for an event."""
    if isinstance(event, TokenEvent):
        return {
            "token": event.text,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    if isinstance(event, DoneEvent):
        return {"done": True}
    return {"error": True, "message": event.message}


def encode_frame(event: StreamEvent) -> bytes:
    """
    Encode an event as one self-contained frame.

    JSON escapes newlines inside strings, so the payload never contains
    the record delimiter.
    """
    data = json.dumps(event_payload(event), ensure_ascii=False)
    return f"{FRAME_PREFIX}{data}{RECORD_DELIMITER}{RECORD_DELIMITER}".encode("utf-8")


def decode_payload(raw: str) -> StreamEvent:
    """
    Decode the JSON payload of a data record.

    Raises:
        FrameDecodeError: If the payload is not JSON or has no known shape
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise FrameDecodeError(f"Invalid JSON payload: {e}") from e

    if not isinstance(data, dict):
        raise FrameDecodeError(f"Payload is not an object: {raw[:80]!r}")

    if data.get("error"):
        message = data.get("message")
        return ErrorEvent(message=message if isinstance(message, str) and message else "Streaming error")

    if data.get("done"):
        return DoneEvent()

    token = data.get("token")
    if isinstance(token, str):
        return TokenEvent(text=token)

    raise FrameDecodeError(f"Unrecognised payload: {raw[:80]!r}")
