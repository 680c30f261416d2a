"""Configuration management from environment variables."""

import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

from alertbot.utils.constants import (
    DEFAULT_DELIVERY_TIMEOUT,
    DEFAULT_REMINDER_MINUTES,
    DEFAULT_STATE_FILE,
    DEFAULT_TIMEZONE,
)

load_dotenv()


def _int_env(name: str, default: int) -> int:
    """Read an integer variable, keeping the default if it is not a number."""
    try:
        return int(os.getenv(name, ""))
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, ""))
    except ValueError:
        return default


def _bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "t", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

    # State snapshot
    STATE_FILE: Path = Path(os.getenv("STATE_FILE", DEFAULT_STATE_FILE))

    # Logging
    BOT_DEBUG: bool = _bool_env("BOT_DEBUG")
    LOG_LEVEL: str = "DEBUG" if BOT_DEBUG else os.getenv("LOG_LEVEL", "INFO").upper()

    # Scheduling
    REMINDER_MINUTES: int = _int_env("REMINDER_MINUTES", DEFAULT_REMINDER_MINUTES)
    TIMEZONE: str = os.getenv("TZ", DEFAULT_TIMEZONE) or DEFAULT_TIMEZONE
    DELIVERY_TIMEOUT: float = _float_env("DELIVERY_TIMEOUT", DEFAULT_DELIVERY_TIMEOUT)

    @classmethod
    def lead_time(cls) -> timedelta:
        """How long before an event its notification is sent."""
        return timedelta(minutes=cls.REMINDER_MINUTES)

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration."""
        if not cls.TELEGRAM_BOT_TOKEN:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN is required. Please set it in .env file or environment variables"
            )

        if cls.REMINDER_MINUTES <= 0:
            raise ValueError("REMINDER_MINUTES must be a positive number of minutes")

        if cls.DELIVERY_TIMEOUT <= 0:
            raise ValueError("DELIVERY_TIMEOUT must be positive")

        # Ensure the state directory exists
        cls.STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
