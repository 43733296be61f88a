"""Clock and astronomical sources consumed by the scheduling core."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Dict, Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from astral import Observer
from astral.sun import sunrise as astral_sunrise
from astral.sun import sunset as astral_sunset

from .errors import ConfigurationInvalid
from .logger import get_logger

logger = get_logger(__name__)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Return a ``ZoneInfo`` for ``name`` or ``None`` for host local time."""

    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationInvalid(f"Unknown timezone: {name!r}") from exc


class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in the configured timezone (host local time when unset)."""

    def __init__(self, tz: Optional[tzinfo] = None) -> None:
        self._tz = tz

    def now(self) -> datetime:
        if self._tz is None:
            return datetime.now().astimezone()
        return datetime.now(self._tz)


class FixedClock:
    """Manually driven clock used by simulations and tests."""

    def __init__(self, now: datetime) -> None:
        self._now = now
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value

    def advance(self, **delta: float) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(**delta)
            return self._now


@dataclass(frozen=True, slots=True)
class SunTimes:
    """Sunrise and sunset for one day; either may be unknown."""

    day: date
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None


class SunSource(Protocol):
    """Source of astronomical times for a given day."""

    def sun_times(self, day: date) -> SunTimes:
        ...


class FixedSunSource:
    """Return the same clock times for sunrise and sunset every day."""

    def __init__(self, sunrise: Optional[time] = None, sunset: Optional[time] = None, tz: Optional[tzinfo] = None) -> None:
        self._sunrise = sunrise
        self._sunset = sunset
        self._tz = tz

    def sun_times(self, day: date) -> SunTimes:
        return SunTimes(
            day=day,
            sunrise=datetime.combine(day, self._sunrise, tzinfo=self._tz) if self._sunrise is not None else None,
            sunset=datetime.combine(day, self._sunset, tzinfo=self._tz) if self._sunset is not None else None,
        )


class AstralSunSource:
    """Compute sunrise and sunset for a fixed observer using ``astral``."""

    def __init__(self, latitude: float, longitude: float, tz: Optional[tzinfo] = None, elevation: float = 0.0) -> None:
        self._observer = Observer(latitude=latitude, longitude=longitude, elevation=elevation)
        self._tz = tz
        self._cache: Dict[date, SunTimes] = {}
        self._lock = threading.Lock()
        logger.info("Astral sun source configured (lat=%.4f lon=%.4f)", latitude, longitude)

    def sun_times(self, day: date) -> SunTimes:
        with self._lock:
            cached = self._cache.get(day)
            if cached is not None:
                return cached
            tz = self._tz or datetime.now().astimezone().tzinfo
            times = SunTimes(
                day=day,
                sunrise=self._compute(astral_sunrise, day, tz, "sunrise"),
                sunset=self._compute(astral_sunset, day, tz, "sunset"),
            )
            # Only today's values are ever requested; drop older days.
            self._cache = {day: times}
            return times

    def _compute(self, func, day: date, tz: tzinfo, event: str) -> Optional[datetime]:
        try:
            return func(self._observer, date=day, tzinfo=tz)
        except ValueError as exc:
            # Polar day or night: the sun never crosses the horizon.
            logger.warning("No %s on %s at this location: %s", event, day.isoformat(), exc)
            return None


__all__ = [
    "AstralSunSource",
    "Clock",
    "FixedClock",
    "FixedSunSource",
    "SunSource",
    "SunTimes",
    "SystemClock",
    "resolve_timezone",
]
