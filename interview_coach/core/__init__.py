"""
Core business logic modules for Interview Coach

Contains:
- Generation Backend: Gemini model access
- Stream Relay: Backend fragments to protocol frames (server side)
- Stream Consumer: Protocol frames back to events (client side)
- API Client: HTTP access to the relay endpoints
- Interview Orchestrator: Turn-taking state machine
"""

from interview_coach.core.generation import GenerationBackend, GenerationError
from interview_coach.core.stream_relay import StreamRelay
from interview_coach.core.stream_consumer import CancellationToken, StreamConsumer
from interview_coach.core.api_client import ApiClientError, InterviewApiClient
from interview_coach.core.interview_orchestrator import InterviewOrchestrator

__all__ = [
    "GenerationBackend",
    "GenerationError",
    "StreamRelay",
    "CancellationToken",
    "StreamConsumer",
    "ApiClientError",
    "InterviewApiClient",
    "InterviewOrchestrator",
]
