"""Shared fixtures for the Interview Coach test suite."""

import pytest

from interview_coach.config.settings import Settings
from tests.helpers import FakeApiClient


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        gemini_api_key="test-key",
        feedback_delay_seconds=0,
    )


@pytest.fixture
def fake_api() -> FakeApiClient:
    return FakeApiClient()
