"""Runtime settings for the PoolClock controller.

Values come from ``POOLCLOCK_*`` environment variables or a ``.env`` file in
the working directory. ``get_settings`` caches one instance per process;
``reload_settings`` re-reads the environment.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POLL_INTERVAL_SECONDS = 10.0


def _day_bit_pairs(raw: str) -> Dict[str, int]:
    overrides: Dict[str, int] = {}
    for token in filter(None, (part.strip() for part in raw.replace(";", ",").split(","))):
        name, sep, bit = (piece.strip() for piece in token.partition("="))
        if not (sep and name and bit):
            raise ValueError(f"Invalid schedule day override: {token!r}")
        overrides[name.lower()] = int(bit, 0)
    return overrides


class AppSettings(BaseSettings):
    """Controller settings: API server, logging, scheduler timing, site and data files."""

    model_config = SettingsConfigDict(env_prefix="POOLCLOCK_", env_file=".env", extra="ignore")

    # Status API server
    host: str = Field(default="0.0.0.0", description="Interface the status API binds to.")
    port: int = Field(default=8000, description="Port the status API listens on.")
    reload: bool = Field(default=False, description="Uvicorn auto-reload; development only.")
    log_level: str = Field(default="info", description="Log level handed to uvicorn.")

    # Per-level switches for PoolClock's own log output
    log_error_enabled: bool = Field(default=True, description="Write error and critical records.")
    log_warning_enabled: bool = Field(default=True, description="Write warning records.")
    log_info_enabled: bool = Field(default=True, description="Write info records such as circuit changes.")
    log_debug_enabled: bool = Field(default=False, description="Write per-tick debug records.")

    # Scheduling
    scheduler_enabled: bool = Field(
        default=True,
        description="Run the background scheduling loop while the API server is up.",
    )
    poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL_SECONDS,
        gt=0.0,
        description="Seconds between scheduling ticks.",
    )
    schedule_day_bits: Dict[str, int] | str = Field(
        default_factory=dict,
        description="Weekday bit overrides for weekday-mask schedules, e.g. 'sun=1,mon=2' or a JSON object.",
    )

    # Site
    timezone: Optional[str] = Field(default=None, description="IANA timezone; host local time when unset.")
    latitude: Optional[float] = Field(
        default=None,
        ge=-90.0,
        le=90.0,
        description="Site latitude for sunrise/sunset. Sun-relative schedules stay off without it.",
    )
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0, description="Site longitude.")

    # Data files
    schedules_path: Path = Field(default=Path("schedules.json"), description="Schedule definitions (JSON).")
    equipment_path: Path = Field(
        default=Path("equipment.json"),
        description="Circuits and bodies for the simulated equipment backend (JSON).",
    )

    @field_validator("schedule_day_bits", mode="before")
    @classmethod
    def _parse_schedule_day_bits(cls, value: Any) -> Dict[str, int]:
        """Accept a mapping, a JSON object string, or ``name=bit`` pairs."""

        if value is None:
            return {}
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return {}
            if text.startswith("{"):
                try:
                    value = json.loads(text)
                except json.JSONDecodeError as exc:
                    raise ValueError(f"Invalid schedule day overrides: {exc}") from exc
            else:
                return _day_bit_pairs(text)
        if isinstance(value, dict):
            return {str(name).strip().lower(): int(bit) for name, bit in value.items()}
        raise ValueError(f"Unsupported schedule day override type: {type(value)!r}")


_SETTINGS_LOCK = RLock()
_SETTINGS: AppSettings | None = None


def reload_settings() -> AppSettings:
    """Read the environment again and replace the cached settings."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        _SETTINGS = AppSettings()
        logging.getLogger("poolclock.config").debug("Settings loaded from environment")
        return _SETTINGS


def get_settings() -> AppSettings:
    """Return the cached settings, loading them on first use."""

    with _SETTINGS_LOCK:
        return _SETTINGS if _SETTINGS is not None else reload_settings()
