# app/core/config.py

import os
from typing import Final

from pydantic import BaseModel, field_validator

from app.core.constants import STORAGE_BACKEND_SQLITE, STORAGE_BACKENDS


# ==========================
# Rate table (EUR)
# ==========================

#: Per hour for weekday on-call outside office hours.
WEEKDAY_ONCALL_RATE: Final[float] = 3.90

#: Per hour for weekend (and holiday) on-call.
WEEKEND_ONCALL_RATE: Final[float] = 7.34

#: Base hourly salary that incident multipliers apply to.
BASE_HOURLY_SALARY: Final[float] = 33.50

#: Incident multiplier on weekdays.
WEEKDAY_INCIDENT_MULTIPLIER: Final[float] = 1.8

#: Incident multiplier on weekends and holidays.
WEEKEND_INCIDENT_MULTIPLIER: Final[float] = 2.0

#: Extra multiplier for incident work during the night shift (40 % bonus).
NIGHT_SHIFT_BONUS_MULTIPLIER: Final[float] = 1.4


# ==========================
# Hour equivalents (precedence path)
# ==========================

#: One weekday hour counts as one hour.
HOUR_EQUIVALENT_REGULAR: Final[float] = 1.0

#: A night-shift hour counts as 1.5 hours.
HOUR_EQUIVALENT_NIGHT_SHIFT: Final[float] = 1.5

#: A weekend hour counts as two hours.
HOUR_EQUIVALENT_WEEKEND: Final[float] = 2.0

#: A holiday hour counts as two hours (same as the weekend rate it overrides).
HOUR_EQUIVALENT_HOLIDAY: Final[float] = 2.0


# ==========================
# Office hours / night shift
# ==========================

#: Office hours start (inclusive), local hour.
OFFICE_HOURS_START: Final[int] = 9

#: Office hours end (exclusive), local hour.
OFFICE_HOURS_END: Final[int] = 17

#: Night shift starts at this local hour.
NIGHT_SHIFT_START_HOUR: Final[int] = 22

#: Night shift ends before this local hour. Pass end_hour=7 to is_night_shift for the longer window.
NIGHT_SHIFT_END_HOUR: Final[int] = 6


# ==========================
# Formats
# ==========================

#: Month key used in summaries, e.g. "2024-01".
MONTH_KEY_FORMAT: Final[str] = "%Y-%m"


# ==========================
# Runtime settings (environment)
# ==========================


class Settings(BaseModel):
    """Process-wide settings read once at start-up."""

    production: bool = False
    storage_backend: str = STORAGE_BACKEND_SQLITE
    database_url: str = "sqlite:///./app/database/calendar.db"
    document_store_path: str = "data/document_store.json"
    timezone: str = "Europe/Amsterdam"
    cors_origins: list[str] = []
    sentry_dsn: str = ""
    release: str = "oncall-compensation@0.1.0"

    @field_validator("storage_backend")
    @classmethod
    def _known_backend(cls, value: str) -> str:
        if value not in STORAGE_BACKENDS:
            raise ValueError(f"Unknown storage backend {value!r}, expected one of {STORAGE_BACKENDS}")
        return value


def load_settings_from_env() -> Settings:
    """Build Settings from environment variables."""
    cors = os.getenv("CORS_ORIGINS", "")
    return Settings(
        production=os.getenv("PRODUCTION", "false").lower() == "true",
        storage_backend=os.getenv("STORAGE_BACKEND", STORAGE_BACKEND_SQLITE),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./app/database/calendar.db"),
        document_store_path=os.getenv("DOCUMENT_STORE_PATH", "data/document_store.json"),
        timezone=os.getenv("APP_TIMEZONE", "Europe/Amsterdam"),
        cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
        sentry_dsn=os.getenv("SENTRY_DSN", "").strip(),
        release=os.getenv("RELEASE_VERSION", "oncall-compensation@0.1.0"),
    )
