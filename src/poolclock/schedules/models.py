"""Schedule configuration records and the value maps they refer to."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class ScheduleType(str, Enum):
    """Recurrence kind of a schedule."""

    RUN_ONCE = "runonce"
    REPEAT = "repeat"


class TimeType(str, Enum):
    """How a schedule start or end time is expressed."""

    CLOCK = "clock"
    SUNRISE = "sunrise"
    SUNSET = "sunset"


_TIME_TYPE_ALIASES = {0: TimeType.CLOCK, 1: TimeType.SUNRISE, 2: TimeType.SUNSET, "manual": TimeType.CLOCK}


class HeatSource(str, Enum):
    """Heat source a schedule selects for its body when it turns on."""

    NO_CHANGE = "nochange"
    DONT_CHANGE = "dontchange"
    OFF = "off"
    HEAT = "heat"
    HEATER = "heater"
    SOLAR = "solar"
    SOLAR_PREFERRED = "solarpref"
    HEAT_PUMP = "heatpump"
    HEAT_PUMP_PREFERRED = "heatpumppref"
    ULTRATEMP = "ultratemp"
    ULTRATEMP_PREFERRED = "ultratemppref"
    HEAT_COOL = "heatcool"

    @property
    def changes_heat_mode(self) -> bool:
        return self not in (HeatSource.NO_CHANGE, HeatSource.DONT_CHANGE)

    @property
    def has_cool_setpoint(self) -> bool:
        return self in (HeatSource.ULTRATEMP, HeatSource.ULTRATEMP_PREFERRED, HeatSource.HEAT_COOL)


@dataclass(frozen=True, slots=True)
class ScheduleDay:
    """Weekday entry of the schedule-day value map.

    ``weekday`` follows :meth:`datetime.date.weekday` (Monday is 0). ``bit_val``
    overrides ``val`` for boards whose day mask differs from the default.
    """

    name: str
    weekday: int
    val: int
    bit_val: Optional[int] = None

    @property
    def bit(self) -> int:
        return self.bit_val or self.val


DEFAULT_SCHEDULE_DAYS: Tuple[ScheduleDay, ...] = (
    ScheduleDay("sat", 5, 1),
    ScheduleDay("sun", 6, 2),
    ScheduleDay("mon", 0, 4),
    ScheduleDay("tue", 1, 8),
    ScheduleDay("wed", 2, 16),
    ScheduleDay("thu", 3, 32),
    ScheduleDay("fri", 4, 64),
)


def build_schedule_days(overrides: Optional[Mapping[str, int]] = None) -> Tuple[ScheduleDay, ...]:
    """Return the default day map with ``bit_val`` overrides applied by day name."""

    if not overrides:
        return DEFAULT_SCHEDULE_DAYS
    known = {day.name for day in DEFAULT_SCHEDULE_DAYS}
    unknown = set(overrides) - known
    if unknown:
        raise ValueError(f"Unknown schedule day names: {sorted(unknown)}")
    return tuple(
        ScheduleDay(day.name, day.weekday, day.val, overrides.get(day.name, day.bit_val))
        for day in DEFAULT_SCHEDULE_DAYS
    )


def weekday_bit(weekday: int, days: Tuple[ScheduleDay, ...] = DEFAULT_SCHEDULE_DAYS) -> int:
    """Return the day-mask bit for a Python weekday number."""

    for day in days:
        if day.weekday == weekday:
            return day.bit
    raise ValueError(f"No schedule day defined for weekday {weekday}")


class ScheduleConfig(BaseModel):
    """A schedule as held by the configuration store.

    Field names accept both snake_case and the camelCase spelling used by
    controller exports (``scheduleDays``, ``startTimeType``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: int = Field(ge=1)
    name: Optional[str] = None
    circuit: int
    is_active: bool = True
    master: bool = Field(default=False, description="Schedule is under this controller's control.")
    schedule_type: ScheduleType = ScheduleType.REPEAT
    start_year: Optional[int] = None
    start_month: Optional[int] = Field(default=None, ge=1, le=12)
    start_day: Optional[int] = Field(default=None, ge=1, le=31)
    schedule_days: int = Field(default=0, ge=0, le=0xFF)
    start_time_type: TimeType = TimeType.CLOCK
    start_time: int = Field(default=0, ge=0, le=1440, description="Minutes after midnight.")
    end_time_type: TimeType = TimeType.CLOCK
    end_time: int = Field(default=0, ge=0, le=1440, description="Minutes after midnight.")
    heat_source: HeatSource = HeatSource.NO_CHANGE
    heat_setpoint: Optional[float] = None
    cool_setpoint: Optional[float] = None

    @field_validator("start_time_type", "end_time_type", mode="before")
    @classmethod
    def _parse_time_type(cls, value: Any) -> Any:
        """Accept the numeric codes (0 clock, 1 sunrise, 2 sunset) and ``manual``."""

        if isinstance(value, str):
            value = value.strip().lower()
        elif not isinstance(value, int) or isinstance(value, bool):
            return value
        return _TIME_TYPE_ALIASES.get(value, value)

    @field_validator("heat_source", "schedule_type", mode="before")
    @classmethod
    def _normalise_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _check_run_once_date(self) -> "ScheduleConfig":
        if self.schedule_type is ScheduleType.RUN_ONCE:
            if None in (self.start_year, self.start_month, self.start_day):
                raise ValueError("Run-once schedules require start_year, start_month and start_day")
        return self

    def merged(self, payload: Mapping[str, Any]) -> "ScheduleConfig":
        """Return a validated copy with ``payload`` applied on top of this record."""

        names = {info.alias: name for name, info in type(self).model_fields.items() if info.alias}
        data: Dict[str, Any] = self.model_dump()
        for key, value in payload.items():
            data[names.get(key, key)] = value
        data["id"] = self.id
        return type(self).model_validate(data)


__all__ = [
    "DEFAULT_SCHEDULE_DAYS",
    "HeatSource",
    "ScheduleConfig",
    "ScheduleDay",
    "ScheduleType",
    "TimeType",
    "build_schedule_days",
    "weekday_bit",
]
