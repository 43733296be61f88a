"""Set of schedule runtimes under this controller's control."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..equipment.base import EquipmentController
from ..errors import ScheduleInvariantError, ScheduleNotFoundError
from ..logger import get_logger
from ..sources import Clock, FixedSunSource, SunSource, SystemClock
from .context import ApplyFailure, EvaluationContext, HeatModeIntent
from .models import DEFAULT_SCHEDULE_DAYS, ScheduleConfig, ScheduleDay
from .runtime import ScheduleRuntime
from .snapshot import TickSnapshot

logger = get_logger(__name__)

ScheduleListener = Callable[[int, bool], None]
ScheduleLookup = Callable[[int], Optional[ScheduleConfig]]


@dataclass
class TickReport:
    """Summary of one evaluate-then-apply pass."""

    started: datetime
    evaluated: List[int] = field(default_factory=list)
    states: Dict[int, bool] = field(default_factory=dict)
    circuits: Dict[int, bool] = field(default_factory=dict)
    heat_modes: Dict[int, HeatModeIntent] = field(default_factory=dict)
    failures: List[ApplyFailure] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started": self.started.isoformat(timespec="seconds"),
            "evaluated": list(self.evaluated),
            "states": {str(key): value for key, value in self.states.items()},
            "circuits": {str(key): value for key, value in self.circuits.items()},
            "heat_modes": {str(key): intent.to_dict() for key, intent in self.heat_modes.items()},
            "failures": [failure.to_dict() for failure in self.failures],
        }


class ScheduleCollection:
    """Own schedule runtimes keyed by schedule id and run scheduling ticks over them.

    Runtimes are evaluated in insertion order, which decides which schedule
    wins when two target the same circuit in one tick.
    """

    def __init__(
        self,
        equipment: EquipmentController,
        *,
        clock: Optional[Clock] = None,
        sun_source: Optional[SunSource] = None,
        lookup: Optional[ScheduleLookup] = None,
        days: Tuple[ScheduleDay, ...] = DEFAULT_SCHEDULE_DAYS,
    ) -> None:
        self._equipment = equipment
        self._clock = clock or SystemClock()
        self._sun_source = sun_source or FixedSunSource()
        self._lookup = lookup
        self._days = days
        self._runtimes: Dict[int, ScheduleRuntime] = {}
        self._listeners: List[ScheduleListener] = []
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._runtimes)

    def __contains__(self, schedule_id: object) -> bool:
        return schedule_id in self._runtimes

    def __iter__(self) -> Iterator[ScheduleRuntime]:
        with self._lock:
            return iter(list(self._runtimes.values()))

    def get(self, schedule_id: int) -> Optional[ScheduleRuntime]:
        return self._runtimes.get(schedule_id)

    # ------------------------------------------------------------------ #
    # Lifecycle                                                          #
    # ------------------------------------------------------------------ #

    def initialize_from_config(self, schedules: Iterable[ScheduleConfig]) -> int:
        """Create runtimes for every active schedule under our control; return how many were added."""

        added = 0
        with self._lock:
            for schedule in schedules:
                if not schedule.master or not schedule.is_active:
                    continue
                if schedule.id in self._runtimes:
                    continue
                logger.info("Initializing schedule %s", schedule.id)
                self._runtimes[schedule.id] = ScheduleRuntime(schedule, self._days)
                added += 1
        return added

    def apply_schedule_config(self, schedule_id: int, payload: Optional[Mapping[str, Any]] = None) -> ScheduleRuntime:
        """Create the runtime for ``schedule_id`` if needed, otherwise forward the update to it."""

        payload = dict(payload or {})
        with self._lock:
            runtime = self._runtimes.get(schedule_id)
            if runtime is not None:
                runtime.update(payload)
                return runtime

            base = self._lookup(schedule_id) if self._lookup else None
            try:
                if base is not None:
                    schedule = base.merged({**payload, "master": True})
                else:
                    schedule = ScheduleConfig.model_validate({**payload, "id": schedule_id, "master": True})
            except ValidationError as exc:
                if base is None:
                    raise ScheduleNotFoundError(f"No schedule with id {schedule_id} to take control of") from exc
                raise
            runtime = ScheduleRuntime(schedule, self._days)
            self._runtimes[schedule_id] = runtime
            logger.info("A runtime was not found for schedule %s; created one", schedule_id)
            return runtime

    def remove_schedule(self, schedule_id: int) -> bool:
        """Release control of a schedule. Returns False when it was not controlled."""

        with self._lock:
            runtime = self._runtimes.pop(schedule_id, None)
            if runtime is None:
                return False
            runtime.close()
        logger.info("Schedule %s removed from control", schedule_id)
        return True

    def close(self) -> None:
        with self._lock:
            for runtime in self._runtimes.values():
                runtime.close()
            self._runtimes.clear()
            self._listeners.clear()

    # ------------------------------------------------------------------ #
    # Change notifications                                               #
    # ------------------------------------------------------------------ #

    def subscribe(self, listener: ScheduleListener) -> Callable[[], None]:
        """Register ``listener(schedule_id, is_on)``; returns a callable that unsubscribes."""

        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, runtime: ScheduleRuntime) -> None:
        for listener in list(self._listeners):
            try:
                listener(runtime.id, runtime.state.is_on)
            except Exception as exc:
                logger.exception("Schedule listener failed for schedule %s: %s", runtime.id, exc)

    # ------------------------------------------------------------------ #
    # Scheduling tick                                                    #
    # ------------------------------------------------------------------ #

    def run_tick(self, now: Optional[datetime] = None) -> TickReport:
        """Evaluate every runtime against one snapshot, then apply the merged intents."""

        with self._lock:
            runtimes = list(self._runtimes.values())
            snapshot = TickSnapshot.capture(
                now or self._clock.now(),
                self._sun_source,
                self._equipment,
                (runtime.schedule.circuit for runtime in runtimes),
            )
            report = TickReport(started=snapshot.now)
            ctx = EvaluationContext()
            for runtime in runtimes:
                try:
                    runtime.trigger(ctx, snapshot)
                except ScheduleInvariantError as exc:
                    logger.error("Resetting schedule %s: %s", runtime.id, exc)
                    runtime.reset()
                except Exception as exc:
                    logger.exception("Error processing schedule %s: %s", runtime.id, exc)
                    runtime.reset()
                report.evaluated.append(runtime.id)

            applied = ctx.apply(self._equipment)
            # Schedules behind a rejected command retry from their pre-tick state.
            contributors = {sid for cid in applied.failed_circuits() for sid in ctx.writers(cid)}
            contributors.update(sid for bid in applied.failed_bodies() for sid in ctx.body_writers(bid))
            for schedule_id in contributors:
                runtime = self._runtimes.get(schedule_id)
                if runtime is not None:
                    runtime.rollback()

            for runtime in runtimes:
                runtime.state.last_evaluated = snapshot.now
                report.states[runtime.id] = runtime.state.is_on
                self._emit(runtime)

            report.circuits = applied.circuits
            report.heat_modes = applied.heat_modes
            report.failures = applied.failures
        logger.debug(
            "Tick at %s evaluated %d schedules (%d circuit intents, %d failures)",
            snapshot.now.isoformat(timespec="seconds"),
            len(report.evaluated),
            len(report.circuits),
            len(report.failures),
        )
        return report


__all__ = ["ScheduleCollection", "ScheduleListener", "TickReport"]
