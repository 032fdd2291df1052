"""
GiftKeeper — Centralized configuration.

Loads all settings from .env and validates them.
Stores and the tracker fall back to these values when no explicit
argument is given.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from giftkeeper/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)

_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # SQLite file backing the key/value persistence port
    DATABASE_PATH: str = "data/giftkeeper.db"

    # Currency used when a form leaves it unset
    DEFAULT_CURRENCY: str = "USD"

    # Occasions
    DEFAULT_REMINDER_DAYS: int = 14
    UPCOMING_WINDOW_DAYS: int = 30

    LOG_LEVEL: str = "INFO"

    @field_validator("DEFAULT_CURRENCY", mode="before")
    @classmethod
    def parse_currency(cls, v: str) -> str:
        code = str(v).strip().upper()
        if code not in _CURRENCIES:
            raise ValueError(f"Unsupported currency {v!r}, expected one of {_CURRENCIES}")
        return code

    @field_validator("DEFAULT_REMINDER_DAYS", "UPCOMING_WINDOW_DAYS", mode="before")
    @classmethod
    def parse_days(cls, v: str | int) -> int:
        days = int(v)
        if days < 0:
            raise ValueError(f"Day counts must be non-negative, got {days}")
        return days

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_level(cls, v: str) -> str:
        return str(v).strip().upper() or "INFO"


def _load_settings() -> Settings:
    """Load settings from environment, exiting on invalid values."""
    try:
        return Settings(
            DATABASE_PATH=os.getenv("DATABASE_PATH", "data/giftkeeper.db"),
            DEFAULT_CURRENCY=os.getenv("DEFAULT_CURRENCY", "USD"),
            DEFAULT_REMINDER_DAYS=os.getenv("DEFAULT_REMINDER_DAYS", "14"),
            UPCOMING_WINDOW_DAYS=os.getenv("UPCOMING_WINDOW_DAYS", "30"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )
    except ValueError as exc:
        print(f"ERROR: invalid GiftKeeper configuration in .env: {exc}", file=sys.stderr)
        sys.exit(1)


# Singleton — imported by all other modules as:
#   from giftkeeper.config import settings
settings = _load_settings()
