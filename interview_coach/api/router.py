"""
Main API router for Interview Coach

Aggregates all API routes and provides the main application router.
"""

from fastapi import APIRouter

from interview_coach.api.endpoints import chat, metadata

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    chat.router,
    tags=["Chat"]
)

api_router.include_router(
    metadata.router,
    prefix="/metadata",
    tags=["Metadata"]
)
