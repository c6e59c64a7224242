"""
Business Ranking Service - Configuration
"""
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    BASE_DIR: Path = Path(__file__).parent
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).parent / "data")
    LOG_DIR: Optional[Path] = Field(default_factory=lambda: Path(__file__).parent / "data" / "logs")
    DATABASE_PATH: Path = Field(default_factory=lambda: Path(__file__).parent / "data" / "rankings.db")
    DATABASE_URL: Optional[str] = Field(default=None, description="Overrides DATABASE_PATH when set")
    DATABASE_BUSY_TIMEOUT_SECONDS: float = Field(default=30.0, description="How long a connection waits on a locked SQLite database")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_RETENTION_DAYS: int = Field(default=30)

    # Ranking refresh
    RANKING_REFRESH_INTERVAL_MINUTES: int = Field(default=15)
    RANKING_SET_SIZE: int = Field(default=100, description="Maximum entries per ranked set")
    RANKING_REFRESH_LEASE_SECONDS: int = Field(default=600, description="How long a refresh claim holds before another process may take over")

    # Top rated
    TOP_RATED_MIN_REVIEWS: int = Field(default=3)
    TOP_RATED_MIN_RATING: float = Field(default=3.5)

    # Trending
    TRENDING_MIN_AGE_DAYS: int = Field(default=7)
    TRENDING_MIN_RECENT_REVIEWS: int = Field(default=2)
    TRENDING_SHORT_WINDOW_DAYS: int = Field(default=7)
    TRENDING_LONG_WINDOW_DAYS: int = Field(default=30)

    # New & notable
    NEW_BUSINESS_WINDOW_DAYS: int = Field(default=90)

    # Feed limits
    FEED_DEFAULT_LIMIT: int = Field(default=20)
    FEED_MAX_LIMIT: int = Field(default=50)

    # API
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def ensure_directories():
    """Ensure all required directories exist."""
    dirs = [settings.DATA_DIR]
    if settings.LOG_DIR:
        dirs.append(settings.LOG_DIR)
    for dir_path in dirs:
        dir_path.mkdir(parents=True, exist_ok=True)
