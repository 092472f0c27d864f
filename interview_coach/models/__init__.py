"""
Data models and schemas for Interview Coach

Contains Pydantic models for:
- Interview sessions and transcript messages
- Streaming protocol events and states
- Generation model selection and error categories
"""

from interview_coach.models.interview import (
    ExperienceLevel,
    InterviewPhase,
    InterviewSession,
    Message,
    MessageRole,
    SessionType,
)
from interview_coach.models.stream import (
    DoneEvent,
    ErrorEvent,
    StreamEvent,
    StreamResult,
    StreamState,
    TokenEvent,
)
from interview_coach.models.generation import AIModel, ErrorCategory

__all__ = [
    # Interview
    "ExperienceLevel",
    "InterviewPhase",
    "InterviewSession",
    "Message",
    "MessageRole",
    "SessionType",
    # Stream
    "DoneEvent",
    "ErrorEvent",
    "StreamEvent",
    "StreamResult",
    "StreamState",
    "TokenEvent",
    # Generation
    "AIModel",
    "ErrorCategory",
]
