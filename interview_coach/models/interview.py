"""
Interview session, transcript and phase models for Interview Coach
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class ExperienceLevel(str, Enum):
    """Candidate experience levels offered at setup."""

    STARTER = "starter"
    JUNIOR = "junior"
    MEDIOR = "medior"
    SENIOR = "senior"

    @property
    def display_name(self) -> str:
        """Human-readable label including the year range."""
        names = {
            ExperienceLevel.STARTER: "Starter (0-2 jaar)",
            ExperienceLevel.JUNIOR: "Junior (2-5 jaar)",
            ExperienceLevel.MEDIOR: "Medior (5-10 jaar)",
            ExperienceLevel.SENIOR: "Senior (10+ jaar)",
        }
        return names[self]


class SessionType(str, Enum):
    """Kind of questions the interviewer focuses on."""

    GENERAL = "general"
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"
    SITUATIONAL = "situational"

    @property
    def display_name(self) -> str:
        """Label embedded in prompts and shown in the setup form."""
        names = {
            SessionType.GENERAL: "Algemene Vragen",
            SessionType.BEHAVIORAL: "Gedragsvragen",
            SessionType.TECHNICAL: "Technische Vragen",
            SessionType.SITUATIONAL: "Situationele Vragen",
        }
        return names[self]

    @property
    def description(self) -> str:
        descriptions = {
            SessionType.GENERAL: 'Standaard sollicitatievragen zoals "Vertel over jezelf"',
            SessionType.BEHAVIORAL: "STAR-methode vragen over je ervaring en gedrag",
            SessionType.TECHNICAL: "Vakspecifieke en technische competenties",
            SessionType.SITUATIONAL: "Hypothetische scenario's en probleemoplossing",
        }
        return descriptions[self]


class InterviewPhase(str, Enum):
    """Top-level interview phases."""

    SETUP = "setup"  # User configuring interview
    INTERVIEW = "interview"  # Questions being asked and answered
    FEEDBACK = "feedback"  # Interview over, feedback available


class MessageRole(str, Enum):
    """Author of a transcript message."""

    CANDIDATE = "candidate"
    INTERVIEWER = "interviewer"

    @property
    def display_name(self) -> str:
        return "Kandidaat" if self is MessageRole.CANDIDATE else "Interviewer"


class InterviewSession(BaseModel):
    """Candidate profile the interview is conducted for. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    job_title: str = Field(
        ...,
        description="Job title being interviewed for (required)"
    )
    company: str = ""
    experience_level: ExperienceLevel | None = Field(
        default=None,
        description="Candidate experience level (unset when not chosen)"
    )
    industry: str = ""
    session_type: SessionType = Field(
        default=SessionType.GENERAL,
        description="Kind of questions to focus on"
    )

    # Optional personalisation
    interviewer_name: str | None = None
    interviewee_name: str | None = None

    @property
    def experience_label(self) -> str:
        return self.experience_level.display_name if self.experience_level else ""


class Message(BaseModel):
    """A single turn in the transcript. Immutable once appended."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    role: MessageRole
    text: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def format_transcript(messages: list[Message] | tuple[Message, ...], separator: str = "\n") -> str:
    """Render messages as "Role: text" lines for prompts."""
    return separator.join(
        f"{message.role.display_name}: {message.text}" for message in messages
    )
