"""
AI prompt templates for Interview Coach

Contains structured prompts for:
- Opening the interview
- Next-question generation
- Feedback generation
"""

from interview_coach.prompts.interviewer import InterviewerPrompts
from interview_coach.prompts.feedback import FeedbackPrompts

__all__ = [
    "InterviewerPrompts",
    "FeedbackPrompts",
]
