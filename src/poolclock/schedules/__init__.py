"""Schedule evaluation, batching and lifecycle for PoolClock."""

from .collection import ScheduleCollection, TickReport
from .context import ApplyFailure, ApplyReport, EvaluationContext, HeatModeIntent
from .evaluator import matches_day, resolve_window, should_be_on
from .loop import SchedulerLoop
from .models import (
    DEFAULT_SCHEDULE_DAYS,
    HeatSource,
    ScheduleConfig,
    ScheduleDay,
    ScheduleType,
    TimeType,
    build_schedule_days,
    weekday_bit,
)
from .runtime import ScheduleRunState, ScheduleRuntime, ScheduleState
from .snapshot import TickSnapshot
from .timewindow import resolve_time

__all__ = [
    "ApplyFailure",
    "ApplyReport",
    "DEFAULT_SCHEDULE_DAYS",
    "EvaluationContext",
    "HeatModeIntent",
    "HeatSource",
    "ScheduleCollection",
    "ScheduleConfig",
    "ScheduleDay",
    "ScheduleRunState",
    "ScheduleRuntime",
    "ScheduleState",
    "ScheduleType",
    "SchedulerLoop",
    "TickReport",
    "TickSnapshot",
    "TimeType",
    "build_schedule_days",
    "matches_day",
    "resolve_time",
    "resolve_window",
    "should_be_on",
    "weekday_bit",
]
