"""
API Dependencies

Provides dependency injection for API endpoints.
Manages the process-wide generation backend shared by all requests.
"""

from fastapi import Depends

from interview_coach.config.settings import get_settings
from interview_coach.core.generation import GenerationBackend
from interview_coach.core.stream_relay import StreamRelay


# ============================================================================
# SINGLETON INSTANCES
# ============================================================================

_backend: GenerationBackend | None = None


def get_generation_backend() -> GenerationBackend:
    """
    Get the generation backend singleton.

    Lazily created on first use; its HTTP client is shared by every
    in-flight request.
    """
    global _backend

    if _backend is None:
        _backend = GenerationBackend(get_settings())

    return _backend


def get_stream_relay(
    backend: GenerationBackend = Depends(get_generation_backend),
) -> StreamRelay:
    """Create a relay for one request around the shared backend."""
    return StreamRelay(backend, get_settings())


async def cleanup():
    """Cleanup resources on shutdown."""
    global _backend

    if _backend:
        await _backend.close()

    _backend = None
