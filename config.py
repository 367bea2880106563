"""
Configuration management for the application.
"""

import logging
import os
from pathlib import Path

# Load .env file if it exists
try:
    from dotenv import load_dotenv

    # Load .env from project root
    env_path = Path(__file__).parent / ".env"
    if env_path.exists():
        load_dotenv(env_path, override=True)
    else:
        # Try loading from current directory as fallback
        load_dotenv(override=True)
except ImportError:
    # python-dotenv not installed, skip loading .env
    pass


class Config:
    """Application configuration."""

    APP_NAME: str = os.getenv("APP_NAME", "Guest Verification API")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # API configuration
    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not isinstance(logging.getLevelName(cls.LOG_LEVEL), int):
            raise ValueError(
                f"LOG_LEVEL {cls.LOG_LEVEL!r} is not a valid logging level.\n"
                "Use one of DEBUG, INFO, WARNING, ERROR or CRITICAL."
            )
