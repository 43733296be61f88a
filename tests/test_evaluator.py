from datetime import datetime, time, timedelta

import pytest

from conftest import SUNSET, WEDNESDAY, make_schedule
from poolclock.schedules import TickSnapshot, build_schedule_days, matches_day, should_be_on
from poolclock.sources import FixedSunSource, SunTimes

SUN = FixedSunSource(sunrise=time(6, 15), sunset=SUNSET)


def snapshot_at(moment: datetime, sun_source=SUN) -> TickSnapshot:
    return TickSnapshot(now=moment, sun_times=sun_source.sun_times(moment.date()))


def at(hour: int, minute: int = 0, day: datetime = WEDNESDAY) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


@pytest.mark.parametrize("hour", [0, 8, 12, 19, 23])
def test_inactive_schedule_is_always_off(hour: int) -> None:
    schedule = make_schedule(is_active=False, start_time=0, end_time_type="clock", end_time=1440)
    assert not should_be_on(schedule, snapshot_at(at(hour, 30)))


def test_weekday_window_is_exclusive_at_both_ends() -> None:
    schedule = make_schedule(end_time_type="clock", end_time=10 * 60)
    assert should_be_on(schedule, snapshot_at(at(8, 1)))
    assert should_be_on(schedule, snapshot_at(at(9, 59)))
    assert not should_be_on(schedule, snapshot_at(at(7, 59)))
    assert not should_be_on(schedule, snapshot_at(at(8, 0)))
    assert not should_be_on(schedule, snapshot_at(at(10, 0)))
    assert not should_be_on(schedule, snapshot_at(at(10, 1)))


def test_weekday_mask_must_include_today() -> None:
    schedule = make_schedule(schedule_days=0x7F & ~16)
    assert not should_be_on(schedule, snapshot_at(at(12)))
    assert should_be_on(make_schedule(schedule_days=0x7F), snapshot_at(at(12)))


def test_weekday_bit_override_changes_day_match() -> None:
    schedule = make_schedule(schedule_days=0x80)
    days = build_schedule_days({"wed": 0x80})
    assert should_be_on(schedule, snapshot_at(at(12)), days)
    assert not should_be_on(schedule, snapshot_at(at(12)))


def test_run_once_matches_only_its_date() -> None:
    schedule = make_schedule(schedule_type="runonce", start_year=2024, start_month=6, start_day=5)
    assert matches_day(schedule, WEDNESDAY.date())
    assert should_be_on(schedule, snapshot_at(at(12)))

    moved = make_schedule(schedule_type="runonce", start_year=2024, start_month=6, start_day=6)
    assert not matches_day(moved, WEDNESDAY.date())
    assert not should_be_on(moved, snapshot_at(at(12)))
    assert should_be_on(moved, snapshot_at(at(12, day=WEDNESDAY + timedelta(days=1))))


def test_run_once_ignores_weekday_mask() -> None:
    schedule = make_schedule(
        schedule_type="runonce", schedule_days=0, start_year=2024, start_month=6, start_day=5
    )
    assert should_be_on(schedule, snapshot_at(at(12)))


def test_sunset_end_closes_window() -> None:
    schedule = make_schedule()
    assert should_be_on(schedule, snapshot_at(at(20, 29)))
    assert not should_be_on(schedule, snapshot_at(at(20, 30)))
    assert not should_be_on(schedule, snapshot_at(at(21)))


def test_sunrise_start_ignores_offset() -> None:
    schedule = make_schedule(start_time_type="sunrise", start_time=600, end_time_type="clock", end_time=9 * 60)
    assert should_be_on(schedule, snapshot_at(at(6, 16)))
    assert not should_be_on(schedule, snapshot_at(at(6, 15)))


def test_missing_sun_time_means_off() -> None:
    schedule = make_schedule()
    snapshot = TickSnapshot(now=at(12), sun_times=SunTimes(day=WEDNESDAY.date()))
    assert not should_be_on(schedule, snapshot)


def test_clock_schedule_does_not_need_sun_times() -> None:
    schedule = make_schedule(end_time_type="clock", end_time=17 * 60)
    snapshot = TickSnapshot(now=at(12), sun_times=SunTimes(day=WEDNESDAY.date()))
    assert should_be_on(schedule, snapshot)
