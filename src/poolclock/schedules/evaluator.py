"""Decide whether a schedule's window is open at the snapshot instant."""

from __future__ import annotations

from datetime import date, datetime
from typing import Tuple

from ..errors import TimeResolutionUnavailable
from ..logger import get_logger
from .models import DEFAULT_SCHEDULE_DAYS, ScheduleConfig, ScheduleDay, ScheduleType, weekday_bit
from .snapshot import TickSnapshot
from .timewindow import resolve_time

logger = get_logger(__name__)


def matches_day(schedule: ScheduleConfig, today: date, days: Tuple[ScheduleDay, ...] = DEFAULT_SCHEDULE_DAYS) -> bool:
    """Return True when the schedule runs on ``today``."""

    if schedule.schedule_type is ScheduleType.RUN_ONCE:
        return (today.year, today.month, today.day) == (
            schedule.start_year,
            schedule.start_month,
            schedule.start_day,
        )
    return (schedule.schedule_days & weekday_bit(today.weekday(), days)) != 0


def resolve_window(schedule: ScheduleConfig, snapshot: TickSnapshot) -> Tuple[datetime, datetime]:
    """Return today's (start, end) instants for the schedule.

    Raises :class:`TimeResolutionUnavailable` when either side depends on
    an astronomical time that is unknown today.
    """

    start_of_day = snapshot.start_of_day
    start = resolve_time(start_of_day, schedule.start_time_type, schedule.start_time, snapshot.sun_times)
    if start is None:
        raise TimeResolutionUnavailable(
            f"Schedule {schedule.id} start ({schedule.start_time_type.value}) unavailable for {snapshot.today}"
        )
    end = resolve_time(start_of_day, schedule.end_time_type, schedule.end_time, snapshot.sun_times)
    if end is None:
        raise TimeResolutionUnavailable(
            f"Schedule {schedule.id} end ({schedule.end_time_type.value}) unavailable for {snapshot.today}"
        )
    return start, end


def should_be_on(
    schedule: ScheduleConfig,
    snapshot: TickSnapshot,
    days: Tuple[ScheduleDay, ...] = DEFAULT_SCHEDULE_DAYS,
) -> bool:
    """Return True when ``schedule`` wants its circuit on at ``snapshot.now``.

    The window is exclusive at both ends: the schedule is off at exactly its
    start and end instants.
    """

    if not schedule.is_active:
        return False
    if not matches_day(schedule, snapshot.today, days):
        return False
    try:
        start, end = resolve_window(schedule, snapshot)
    except TimeResolutionUnavailable as exc:
        logger.debug("%s; treating as off", exc)
        return False
    now = snapshot.now
    if now >= end:
        return False
    if now <= start:
        return False
    return True


__all__ = ["matches_day", "resolve_window", "should_be_on"]
