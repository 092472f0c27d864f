"""
Chat API endpoints

Handles model generation requests:
- Streaming generation as an event stream
- Complete (non-streaming) generation
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from interview_coach.api.dependencies import get_stream_relay
from interview_coach.core.generation import GenerationError
from interview_coach.core.stream_relay import (
    BackendNotConfiguredError,
    PromptValidationError,
    StreamRelay,
)
from interview_coach.models.generation import AIModel

logger = logging.getLogger(__name__)

router = APIRouter()

MISSING_KEY_HINT = "Voeg GEMINI_API_KEY toe aan je environment variables"
GENERIC_ERROR = "Er is een fout opgetreden bij het verwerken van je bericht"


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class ChatRequest(BaseModel):
    """Request model for both chat endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    # Left untyped so the relay can report a 400 instead of a schema error
    message: Any = None
    ai_model: AIModel = Field(default=AIModel.SMART, alias="aiModel")


class ChatResponse(BaseModel):
    """Response for a complete generation."""
    response: str
    success: bool = True


# ============================================================================
# HELPERS
# ============================================================================

def _preflight(relay: StreamRelay, request: ChatRequest) -> str | JSONResponse:
    """Run the request checks; returns the prompt or an error response."""
    try:
        relay.ensure_configured()
        return relay.validate_prompt(request.message)
    except BackendNotConfiguredError as e:
        return JSONResponse(
            status_code=500,
            content={"error": str(e), "hint": MISSING_KEY_HINT},
        )
    except PromptValidationError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post("/chat-stream")
async def chat_stream(
    request: ChatRequest,
    relay: StreamRelay = Depends(get_stream_relay),
):
    """
    Stream a generation token-by-token.

    Failures after the stream has opened are reported in-band as an
    error frame, since the status code is already sent.
    """
    logger.info(
        f"Streaming request received: has_message={bool(request.message)}, "
        f"ai_model={request.ai_model.value}"
    )

    prompt = _preflight(relay, request)
    if isinstance(prompt, JSONResponse):
        return prompt

    return StreamingResponse(
        relay.frames(prompt, request.ai_model),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    relay: StreamRelay = Depends(get_stream_relay),
):
    """Generate a complete response in a single payload."""
    logger.info(
        f"Chat request received: has_message={bool(request.message)}, "
        f"ai_model={request.ai_model.value}"
    )

    prompt = _preflight(relay, request)
    if isinstance(prompt, JSONResponse):
        return prompt

    try:
        text = await relay.complete(prompt, request.ai_model)
    except GenerationError as e:
        logger.error(f"Error calling Gemini API ({e.category.value}): {e.message}")
        return JSONResponse(
            status_code=500,
            content={
                "error": GENERIC_ERROR,
                "details": e.user_message,
                "category": e.category.value,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return ChatResponse(response=text)
