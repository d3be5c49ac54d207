"""Application configuration"""

import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Matchday API"
    debug: bool = False
    log_level: str = "INFO"
    public_base_url: str = "http://localhost:8000"
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Database
    database_path: str = "/app/data/matchday.json"

    # Scheduling
    ready_window_days: int = 14  # matches further out are never flagged red
    today_refresh_minutes: int = 30
    timezone: str = "Europe/Berlin"

    # Sharing
    access_code_length: int = 4

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "MATCHDAY_"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    settings = Settings()
    if settings.debug:
        logger.info(f"Debug mode enabled, database at {settings.database_path}")
    return settings


# Convenience access
settings = get_settings()
