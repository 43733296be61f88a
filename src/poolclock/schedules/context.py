"""Per-tick batching of circuit and heat-mode intents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from ..equipment.base import EquipmentController
from ..errors import EquipmentError
from ..logger import get_logger
from .models import HeatSource

logger = get_logger(__name__)

_BODY_ACTIONS = frozenset({"heat_mode", "heat_setpoint", "cool_setpoint"})


@dataclass(slots=True)
class HeatModeIntent:
    """Desired heat mode for a body; setpoints are only pushed when supplied."""

    body_id: int
    mode: HeatSource
    heat_setpoint: Optional[float] = None
    cool_setpoint: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "body_id": self.body_id,
            "mode": self.mode.value,
            "heat_setpoint": self.heat_setpoint,
            "cool_setpoint": self.cool_setpoint,
        }


@dataclass(slots=True)
class ApplyFailure:
    """A single outward command that the equipment layer rejected."""

    action: str
    target: int
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action, "target": self.target, "error": self.error}


@dataclass
class ApplyReport:
    """Outcome of applying one context to the equipment."""

    heat_modes: Dict[int, HeatModeIntent] = field(default_factory=dict)
    circuits: Dict[int, bool] = field(default_factory=dict)
    failures: List[ApplyFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def failed_circuits(self) -> Set[int]:
        return {failure.target for failure in self.failures if failure.action == "circuit"}

    def failed_bodies(self) -> Set[int]:
        """Bodies whose heat mode or setpoint command was rejected."""

        return {failure.target for failure in self.failures if failure.action in _BODY_ACTIONS}


class EvaluationContext:
    """Collect intents from every schedule before anything touches the equipment.

    The last write for a circuit wins. Heat-mode writes for the same body
    replace the mode but keep setpoints an earlier write supplied unless the
    later write supplies its own.
    """

    def __init__(self) -> None:
        self.circuits: Dict[int, bool] = {}
        self.heat_modes: Dict[int, HeatModeIntent] = {}
        self._circuit_writers: Dict[int, List[int]] = {}
        self._body_writers: Dict[int, List[int]] = {}

    def __len__(self) -> int:
        return len(self.circuits) + len(self.heat_modes)

    def set_circuit(self, circuit_id: int, is_on: bool, *, schedule_id: Optional[int] = None) -> None:
        if circuit_id in self.circuits and self.circuits[circuit_id] != is_on:
            logger.debug("Circuit %s intent overridden to %s by schedule %s", circuit_id, is_on, schedule_id)
        self.circuits[circuit_id] = is_on
        _record_writer(self._circuit_writers, circuit_id, schedule_id)

    def set_heat_mode(
        self,
        body_id: int,
        mode: HeatSource,
        heat_setpoint: Optional[float] = None,
        cool_setpoint: Optional[float] = None,
        *,
        schedule_id: Optional[int] = None,
    ) -> None:
        _record_writer(self._body_writers, body_id, schedule_id)
        intent = self.heat_modes.get(body_id)
        if intent is None:
            self.heat_modes[body_id] = HeatModeIntent(body_id, mode, heat_setpoint, cool_setpoint)
            return
        intent.mode = mode
        if heat_setpoint is not None:
            intent.heat_setpoint = heat_setpoint
        if cool_setpoint is not None:
            intent.cool_setpoint = cool_setpoint

    def writers(self, circuit_id: int) -> Tuple[int, ...]:
        """Return the schedule ids that wrote an intent for ``circuit_id``."""

        return tuple(self._circuit_writers.get(circuit_id, ()))

    def body_writers(self, body_id: int) -> Tuple[int, ...]:
        return tuple(self._body_writers.get(body_id, ()))

    def apply(self, equipment: EquipmentController) -> ApplyReport:
        """Push heat modes, then setpoints, then circuit states to the equipment.

        Each command is attempted independently; failures are logged and
        reported rather than raised.
        """

        report = ApplyReport()
        for body_id, intent in self.heat_modes.items():
            if not self._attempt(report, "heat_mode", body_id, equipment.set_heat_mode, body_id, intent.mode.value):
                continue
            report.heat_modes[body_id] = intent
            if intent.heat_setpoint is not None:
                self._attempt(report, "heat_setpoint", body_id, equipment.set_heat_setpoint, body_id, intent.heat_setpoint)
            if intent.cool_setpoint is not None:
                self._attempt(report, "cool_setpoint", body_id, equipment.set_cool_setpoint, body_id, intent.cool_setpoint)

        for circuit_id, is_on in self.circuits.items():
            if self._attempt(report, "circuit", circuit_id, equipment.set_circuit_state, circuit_id, is_on):
                report.circuits[circuit_id] = is_on
        if report.failures:
            logger.warning("Applied schedule intents with %d failures", len(report.failures))
        return report

    @staticmethod
    def _attempt(report: ApplyReport, action: str, target: int, func: Callable[..., Any], *args: Any) -> bool:
        try:
            func(*args)
        except EquipmentError as exc:
            logger.error("Failed to apply %s for %s: %s", action, target, exc)
            report.failures.append(ApplyFailure(action=action, target=target, error=str(exc)))
            return False
        except Exception as exc:
            logger.exception("Unexpected error applying %s for %s: %s", action, target, exc)
            report.failures.append(ApplyFailure(action=action, target=target, error=str(exc)))
            return False
        return True


def _record_writer(writers: Dict[int, List[int]], target: int, schedule_id: Optional[int]) -> None:
    if schedule_id is None:
        return
    ids = writers.setdefault(target, [])
    if schedule_id not in ids:
        ids.append(schedule_id)


__all__ = ["ApplyFailure", "ApplyReport", "EvaluationContext", "HeatModeIntent"]
