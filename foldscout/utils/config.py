"""
Configuration Management

Uses Pydantic Settings for environment-based configuration.
Loads from .env file automatically.
"""

from typing import Optional
from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Serper rank-check API (optional - without it rankings are not verified)
    SERPER_API_KEY: Optional[str] = None

    # Keywords Everywhere volume API (optional - without it volumes stay unknown)
    KEYWORDS_EVERYWHERE_API_KEY: Optional[str] = None

    # Application Settings
    LOG_LEVEL: str = "INFO"

    # Default locale
    DEFAULT_COUNTRY: str = "gb"
    DEFAULT_LANGUAGE: str = "en"

    # Quota and pacing
    DAILY_SEARCH_LIMIT: int = 100
    RANK_CHECK_DELAY_SECONDS: float = 0.5
    RANK_CHECK_RESULT_COUNT: int = 100

    # Limits
    MAX_CANDIDATES: int = 150
    MAX_VERIFICATIONS: int = 50
    MAX_COMPETITORS: int = 8
    VOLUME_BATCH_SIZE: int = 100

    # Timeouts
    API_TIMEOUT: int = 30

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"  # Ignore extra fields in .env file
        case_sensitive = False  # Allow both UPPERCASE and lowercase


@lru_cache
def get_settings() -> Settings:
    """Get or create cached settings instance."""
    return Settings()
