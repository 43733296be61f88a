from datetime import date, datetime, timezone

from poolclock.schedules import TimeType, resolve_time
from poolclock.sources import SunTimes

START_OF_DAY = datetime(2024, 6, 5)
SUN = SunTimes(
    day=date(2024, 6, 5),
    sunrise=datetime(2024, 6, 5, 6, 15),
    sunset=datetime(2024, 6, 5, 20, 30),
)


def test_clock_time_is_offset_from_midnight() -> None:
    assert resolve_time(START_OF_DAY, TimeType.CLOCK, 480, SUN) == datetime(2024, 6, 5, 8, 0)
    assert resolve_time(START_OF_DAY, TimeType.CLOCK, 1440, SUN) == datetime(2024, 6, 6, 0, 0)


def test_sun_times_ignore_offset() -> None:
    assert resolve_time(START_OF_DAY, TimeType.SUNRISE, 45, SUN) == SUN.sunrise
    assert resolve_time(START_OF_DAY, TimeType.SUNSET, 45, SUN) == SUN.sunset


def test_missing_sun_time_resolves_to_none() -> None:
    empty = SunTimes(day=date(2024, 6, 5))
    assert resolve_time(START_OF_DAY, TimeType.SUNSET, 0, empty) is None
    assert resolve_time(START_OF_DAY, TimeType.CLOCK, 60, empty) == datetime(2024, 6, 5, 1, 0)


def test_clock_time_keeps_timezone() -> None:
    aware = datetime(2024, 6, 5, tzinfo=timezone.utc)
    assert resolve_time(aware, TimeType.CLOCK, 90, SUN).tzinfo is timezone.utc
