"""
Metadata API endpoints

Provides reference data for building the setup form:
- Session types
- Experience levels
- Selectable AI models
"""

from fastapi import APIRouter
from pydantic import BaseModel

from interview_coach.config.settings import get_settings
from interview_coach.models.generation import AIModel
from interview_coach.models.interview import ExperienceLevel, SessionType

router = APIRouter()


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class SessionTypeInfo(BaseModel):
    """Information about a session type."""
    id: str
    name: str
    description: str


class OptionInfo(BaseModel):
    id: str
    name: str


class InterviewLimits(BaseModel):
    question_limit: int
    wrap_up_threshold: int
    max_prompt_chars: int


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("/session-types")
async def get_session_types() -> list[SessionTypeInfo]:
    """Get all available session types."""
    return [
        SessionTypeInfo(
            id=session_type.value,
            name=session_type.display_name,
            description=session_type.description,
        )
        for session_type in SessionType
    ]


@router.get("/experience-levels")
async def get_experience_levels() -> list[OptionInfo]:
    """Get all experience levels."""
    return [
        OptionInfo(id=level.value, name=level.display_name)
        for level in ExperienceLevel
    ]


@router.get("/models")
async def get_models() -> list[OptionInfo]:
    """Get selectable AI models with their backend identifiers."""
    settings = get_settings()
    return [
        OptionInfo(id=model.value, name=model.resolve(settings))
        for model in AIModel
    ]


@router.get("/limits")
async def get_limits() -> InterviewLimits:
    """Get interview length settings."""
    settings = get_settings()
    return InterviewLimits(
        question_limit=settings.question_limit,
        wrap_up_threshold=settings.wrap_up_threshold,
        max_prompt_chars=settings.max_prompt_chars,
    )
