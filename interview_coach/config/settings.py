"""
Application settings and configuration management.

Uses pydantic-settings for environment variable loading.
"""

from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Interview Coach"
    app_version: str = "0.1.0"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Gemini API
    gemini_api_key: str = ""
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Model identifiers per selectable AI model
    gemini_pro_model: str = "gemini-2.5-pro-preview-06-05"
    gemini_smart_model: str = "gemini-2.5-flash-preview-05-20"
    gemini_internet_model: str = "gemini-2.0-flash-exp"

    # Upper bound on a single upstream call (connect + each read)
    generation_timeout_seconds: float = 60.0

    # Request validation
    max_prompt_chars: int = 100_000

    # Interview settings
    question_limit: int = 7
    wrap_up_threshold: int = 6
    history_window: int = 4
    feedback_delay_seconds: float = 2.0

    # CORS - stored as comma-separated string in env
    # Uses validation_alias to read from CORS_ORIGINS env var
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        validation_alias="cors_origins"
    )

    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
