"""
Configuration settings for the lesson document service.
Loads environment variables and provides application-wide settings.
"""
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"
    LOG_LEVEL: str = "INFO"

    # Template Configuration
    DEFAULT_TEMPLATE_ID: str = "default-cte"
    DEFAULT_TEMPLATE_DIR: str = str(_PACKAGE_DIR / "assets" / "cte_lesson_plan")
    TEMPLATE_STORAGE_DIR: str = "./templates"
    # Remote object storage; an empty URL disables the remote store
    TEMPLATE_STORAGE_URL: str = ""
    TEMPLATE_STORAGE_TOKEN: str = ""
    TEMPLATE_FETCH_TIMEOUT: int = 30  # seconds
    MAX_TEMPLATE_SIZE: int = 10 * 1024 * 1024  # 10 MB
    # Raise on row/cell layout mismatch instead of skipping fields
    STRICT_TEMPLATE_SCHEMA: bool = True

    # Lesson Plan Defaults
    DEFAULT_COURSE_TITLE: str = "Media Foundations"
    DEFAULT_CLASS_DURATION: int = 90  # minutes

    # Document Rendering
    DOCUMENT_THEME: str = "navy"
    ANSWER_LINES: int = 2
    STUDENT_SLUG_LENGTH: int = 25
    UNIT_SLUG_LENGTH: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
