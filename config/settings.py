"""Application settings and configuration management."""
from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/interview.db")
    PROVIDER_CONFIG_PATH: Optional[str] = None

    ANSWER_MAX_DURATION_MS: int = Field(default=10 * 60 * 1000, ge=0)
    SAVE_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    CANDIDATE_ERROR_MESSAGE: str = "Something went wrong. Please try again."
    CLIENT_URL: str = "http://localhost:5173"

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
