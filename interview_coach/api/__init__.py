"""
API layer for Interview Coach

Contains FastAPI routers for:
- Streaming and complete chat generation
- Setup reference data
"""

from interview_coach.api.router import api_router

__all__ = ["api_router"]
