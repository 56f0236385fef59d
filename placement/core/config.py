"""
Application configuration settings.
"""

from pathlib import Path
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from libs.domain_types import CEFRLevel


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "CEFR Placement"
    APP_VERSION: str = "0.1.0"
    ENV: Literal["development", "production", "test"] = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Adaptive test composition
    # Level the selector centres the question set on, and the engine's
    # starting rank. B1 matches the middle of the six CEFR levels.
    STARTING_LEVEL: str = Field(
        default="B1",
        description="CEFR short name (A1-C2) the adaptive test starts at",
    )
    QUESTIONS_PER_LEVEL: int = Field(
        default=2,
        ge=1,
        description="Questions sampled from each candidate level",
    )

    # Result history persistence
    HISTORY_FILE: Path = Field(
        default=Path.home() / ".placement" / "history.json",
        description="JSON document holding persisted test results",
    )
    HISTORY_KEY: str = "test_results"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra fields from .env not defined in Settings
    )

    @model_validator(mode="after")
    def validate_starting_level(self) -> Self:
        """Validate STARTING_LEVEL is a known CEFR short name."""
        valid = {level.value for level in CEFRLevel}
        normalized = self.STARTING_LEVEL.strip().upper()
        if normalized not in valid:
            raise ValueError(
                f"STARTING_LEVEL must be one of {sorted(valid)}, "
                f"got {self.STARTING_LEVEL!r}"
            )
        self.STARTING_LEVEL = normalized
        return self

    @property
    def starting_level(self) -> CEFRLevel:
        """STARTING_LEVEL as a CEFRLevel member."""
        return CEFRLevel(self.STARTING_LEVEL)


settings = Settings()
