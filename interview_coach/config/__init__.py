"""
Configuration for Interview Coach
"""

from interview_coach.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
