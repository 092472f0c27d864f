"""
API endpoint modules for Interview Coach
"""

from interview_coach.api.endpoints import chat, metadata

__all__ = ["chat", "metadata"]
