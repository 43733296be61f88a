"""Resolve symbolic schedule times into concrete instants for today."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..sources import SunTimes
from .models import TimeType


def resolve_time(start_of_day: datetime, time_type: TimeType, offset: int, sun_times: SunTimes) -> Optional[datetime]:
    """Return the instant for ``time_type`` today, or ``None`` when it is unknown.

    ``offset`` is minutes after midnight and only applies to clock times;
    sunrise and sunset use today's astronomical value as-is.
    """

    if time_type is TimeType.SUNRISE:
        return sun_times.sunrise
    if time_type is TimeType.SUNSET:
        return sun_times.sunset
    return start_of_day + timedelta(minutes=offset)


__all__ = ["resolve_time"]
