import pytest

pytest.importorskip("pydantic")

from poolclock.config import AppSettings
from poolclock.schedules import build_schedule_days, weekday_bit


def test_default_settings() -> None:
    settings = AppSettings()
    assert settings.poll_interval_seconds == pytest.approx(10.0)
    assert settings.latitude is None
    assert settings.schedule_day_bits == {}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("sun=1,mon=2", {"sun": 1, "mon": 2}),
        ("SUN=0x01; sat=0x40", {"sun": 1, "sat": 64}),
        ('{"wed": 128}', {"wed": 128}),
    ],
)
def test_schedule_day_bits_from_environment(monkeypatch: pytest.MonkeyPatch, value: str, expected: dict) -> None:
    monkeypatch.setenv("POOLCLOCK_SCHEDULE_DAY_BITS", value)
    assert AppSettings().schedule_day_bits == expected


def test_schedule_day_bits_reject_garbage() -> None:
    with pytest.raises(ValueError):
        AppSettings(schedule_day_bits="sun")


def test_poll_interval_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POOLCLOCK_POLL_INTERVAL_SECONDS", "2.5")
    monkeypatch.setenv("POOLCLOCK_LATITUDE", "33.45")
    settings = AppSettings()
    assert settings.poll_interval_seconds == pytest.approx(2.5)
    assert settings.latitude == pytest.approx(33.45)


def test_day_bit_overrides_apply_by_name() -> None:
    days = build_schedule_days({"sun": 1, "sat": 64})
    assert weekday_bit(6, days) == 1
    assert weekday_bit(5, days) == 64
    assert weekday_bit(0, days) == 4
    with pytest.raises(ValueError):
        build_schedule_days({"someday": 1})
