"""
Application Configuration

This module provides type-safe configuration loading using Pydantic settings.
Environment variables are loaded from .env file and validated.

Usage:
    from studypace.config import settings

    # Access settings
    db_url = settings.DATABASE_URL
    tz = settings.TIMEZONE
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic_settings import BaseSettings

from studypace.enums import RateLimitType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Study Pace"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "studypace"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "studypace"

    # Full async SQLAlchemy URL. Overrides the POSTGRES_* settings when set,
    # e.g. "sqlite+aiosqlite:///./studypace.db" for local development.
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        """Async database connection URL."""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def DATABASE_URL_SYNC(self) -> str:
        """Sync PostgreSQL connection URL for Alembic migrations."""
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Calendar: all "today" and rollover decisions use this IANA zone
    TIMEZONE: str = "UTC"

    # Streaks
    STREAK_LOOKBACK_RECORDS: int = 60  # Distinct activity dates read per query
    STREAK_RECENT_DATES: int = 7
    STREAK_MILESTONES: list[int] = [3, 7, 14, 30, 60, 100]

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "120/minute"
    RATE_LIMIT_WRITE: str = "60/minute"

    def get_rate_limit(self, rate_limit_type: RateLimitType) -> str:
        """Get the rate limit string for an endpoint category."""
        if rate_limit_type == RateLimitType.WRITE:
            return self.RATE_LIMIT_WRITE
        return self.RATE_LIMIT_DEFAULT

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@lru_cache()
def load_yaml_config() -> dict[str, Any]:
    """Load application configuration from config/default.yaml."""
    config_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


yaml_config: dict[str, Any] = load_yaml_config()
