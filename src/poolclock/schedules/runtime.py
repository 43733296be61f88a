"""Per-schedule state machine driven once per scheduling tick."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import ScheduleInvariantError
from ..logger import get_logger
from .context import EvaluationContext
from .evaluator import should_be_on
from .models import DEFAULT_SCHEDULE_DAYS, HeatSource, ScheduleConfig, ScheduleDay
from .snapshot import TickSnapshot

logger = get_logger(__name__)


class ScheduleRunState(str, Enum):
    """Whether a schedule is driving its circuit.

    ``ACTIVE`` means the schedule turned the circuit on and still owns it.
    ``SUSPENDED`` means the window is open but the user switched the circuit
    off, so the schedule has yielded until it is switched back on.
    """

    IDLE = "idle"
    ACTIVE = "active"
    SUSPENDED = "suspended"

    @property
    def running(self) -> bool:
        return self is not ScheduleRunState.IDLE

    @property
    def suspended(self) -> bool:
        return self is ScheduleRunState.SUSPENDED


@dataclass
class ScheduleState:
    """Observable on/off state of a schedule, independent of the tick."""

    schedule_id: int
    is_on: bool = False
    last_evaluated: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule_id": self.schedule_id,
            "is_on": self.is_on,
            "last_evaluated": self.last_evaluated.isoformat(timespec="seconds") if self.last_evaluated else None,
        }


class ScheduleRuntime:
    """Owns the run state of one schedule while it is under this controller's control."""

    def __init__(self, schedule: ScheduleConfig, days: Tuple[ScheduleDay, ...] = DEFAULT_SCHEDULE_DAYS) -> None:
        self.schedule = schedule
        self.state = ScheduleState(schedule.id)
        self._days = days
        self._run_state = ScheduleRunState.IDLE
        self._checkpoint: Optional[Tuple[ScheduleRunState, bool, Optional[int]]] = None
        self._released_circuit: Optional[int] = None
        self._closed = False

    @property
    def id(self) -> int:
        return self.schedule.id

    @property
    def run_state(self) -> ScheduleRunState:
        return self._run_state

    @property
    def closed(self) -> bool:
        return self._closed

    def update(self, payload: Mapping[str, Any]) -> ScheduleConfig:
        """Merge a configuration update into the schedule this runtime controls."""

        previous_circuit = self.schedule.circuit
        self.schedule = self.schedule.merged(payload)
        if self.schedule.circuit != previous_circuit and (self._run_state.running or self.state.is_on):
            # The old circuit is switched off on the next tick; the new one is claimed on its rising edge.
            self._released_circuit = previous_circuit
            self._force_off()
            logger.info("Schedule %s moved from circuit %s to %s", self.id, previous_circuit, self.schedule.circuit)
        logger.debug("Schedule %s configuration updated: %s", self.id, sorted(payload))
        return self.schedule

    def trigger(self, ctx: EvaluationContext, snapshot: TickSnapshot) -> bool:
        """Evaluate the schedule against ``snapshot`` and write its intents into ``ctx``.

        Returns the window decision. Transitions:

        * IDLE and window open: claim the circuit (ON intent, heat mode on
          the rising edge only) and become ACTIVE.
        * ACTIVE/SUSPENDED and window open: no intent; SUSPENDED while the
          circuit is manually off, ACTIVE while it is on.
        * window closed: OFF intent if running (or if ``is_on`` is stale),
          then IDLE.

        A circuit released by a retargeting :meth:`update` gets its OFF intent
        first, whatever the window says.
        """

        if self._closed:
            raise ScheduleInvariantError(f"Schedule {self.id} runtime was closed")
        if self._run_state.running and not self.state.is_on:
            raise ScheduleInvariantError(
                f"Schedule {self.id} is {self._run_state.value} but its state reports off"
            )
        self._checkpoint = (self._run_state, self.state.is_on, self._released_circuit)
        if self._released_circuit is not None:
            ctx.set_circuit(self._released_circuit, False, schedule_id=self.id)
            logger.info("Schedule %s turning off released circuit %s", self.id, self._released_circuit)
            self._released_circuit = None

        circuit_id = self.schedule.circuit
        circuit = snapshot.circuit(circuit_id)
        if circuit is None:
            logger.warning("Schedule %s references unknown circuit %s; holding it off", self.id, circuit_id)
            self._force_off()
            return False
        if not circuit.is_active:
            self._force_off()
            return False

        wanted = should_be_on(self.schedule, snapshot, self._days)
        if wanted and self._run_state is ScheduleRunState.IDLE:
            ctx.set_circuit(circuit_id, True, schedule_id=self.id)
            self._request_heat_mode(ctx, snapshot)
            self.state.is_on = True
            self._run_state = ScheduleRunState.ACTIVE
            logger.info("Schedule %s turning on circuit %s", self.id, circuit_id)
        elif wanted:
            self._run_state = ScheduleRunState.ACTIVE if circuit.is_on else ScheduleRunState.SUSPENDED
        else:
            if self._run_state.running or self.state.is_on:
                ctx.set_circuit(circuit_id, False, schedule_id=self.id)
                logger.info("Schedule %s turning off circuit %s", self.id, circuit_id)
            self.state.is_on = False
            self._run_state = ScheduleRunState.IDLE
        return wanted

    def _request_heat_mode(self, ctx: EvaluationContext, snapshot: TickSnapshot) -> None:
        body = snapshot.body_for_circuit(self.schedule.circuit)
        source = self.schedule.heat_source
        if body is None or not source.changes_heat_mode:
            return
        if source is HeatSource.OFF:
            ctx.set_heat_mode(body.id, source, schedule_id=self.id)
            return
        ctx.set_heat_mode(
            body.id,
            source,
            self.schedule.heat_setpoint,
            self.schedule.cool_setpoint if source.has_cool_setpoint else None,
            schedule_id=self.id,
        )

    def _force_off(self) -> None:
        self.state.is_on = False
        self._run_state = ScheduleRunState.IDLE

    def rollback(self) -> None:
        """Restore the state held before the last trigger, e.g. after its intent failed to apply."""

        if self._checkpoint is None:
            return
        self._run_state, self.state.is_on, self._released_circuit = self._checkpoint
        self._checkpoint = None
        logger.debug("Schedule %s rolled back to %s", self.id, self._run_state.value)

    def reset(self) -> None:
        """Return to the safe idle/off state."""

        self._force_off()
        self._checkpoint = None

    def close(self) -> None:
        self._closed = True
        self._checkpoint = None
        self._released_circuit = None

    def to_dict(self) -> Dict[str, Any]:
        payload = self.state.to_dict()
        payload.update(
            {
                "name": self.schedule.name,
                "circuit": self.schedule.circuit,
                "is_active": self.schedule.is_active,
                "run_state": self._run_state.value,
            }
        )
        return payload


__all__ = ["ScheduleRunState", "ScheduleRuntime", "ScheduleState"]
