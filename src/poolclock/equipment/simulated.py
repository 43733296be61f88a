"""In-memory equipment backend used when no board is attached."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from ..errors import ConfigurationInvalid, EquipmentError
from ..logger import get_logger
from .base import Body, Circuit

logger = get_logger(__name__)

_CIRCUITS_ADAPTER = TypeAdapter(List[Circuit])
_BODIES_ADAPTER = TypeAdapter(List[Body])


@dataclass(slots=True)
class EquipmentCommand:
    """A command received by the simulated equipment."""

    action: str
    target: int
    value: Any
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "target": self.target,
            "value": self.value,
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
        }


class SimulatedEquipment:
    """Thread-safe circuit and body state held in memory."""

    def __init__(self, circuits: Iterable[Circuit] = (), bodies: Iterable[Body] = ()) -> None:
        self._lock = threading.RLock()
        self._circuits: Dict[int, Circuit] = {}
        self._bodies: Dict[int, Body] = {}
        self.commands: List[EquipmentCommand] = []
        for circuit in circuits:
            self.add_circuit(circuit)
        for body in bodies:
            self.add_body(body)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulatedEquipment":
        try:
            circuits = _CIRCUITS_ADAPTER.validate_python(data.get("circuits", []))
            bodies = _BODIES_ADAPTER.validate_python(data.get("bodies", []))
        except ValidationError as exc:
            raise ConfigurationInvalid(f"Invalid equipment definition: {exc}") from exc
        return cls(circuits, bodies)

    @classmethod
    def from_file(cls, path: Path) -> "SimulatedEquipment":
        """Load circuits and bodies from a JSON file; a missing file yields no equipment."""

        if not path.exists():
            logger.warning("Equipment file %s not found; starting without circuits", path)
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigurationInvalid(f"Equipment file {path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationInvalid(f"Equipment file {path} must contain a JSON object")
        equipment = cls.from_dict(data)
        logger.info(
            "Loaded %d circuits and %d bodies from %s",
            len(equipment._circuits),
            len(equipment._bodies),
            path,
        )
        return equipment

    # ------------------------------------------------------------------ #
    # Registration and inspection                                        #
    # ------------------------------------------------------------------ #

    def add_circuit(self, circuit: Circuit) -> None:
        with self._lock:
            if circuit.id in self._circuits:
                logger.warning("Replacing existing circuit definition: %s", circuit.id)
            self._circuits[circuit.id] = circuit

    def add_body(self, body: Body) -> None:
        with self._lock:
            if body.id in self._bodies:
                logger.warning("Replacing existing body definition: %s", body.id)
            self._bodies[body.id] = body

    def circuits(self) -> List[Circuit]:
        with self._lock:
            return [replace(circuit) for circuit in self._circuits.values()]

    def bodies(self) -> List[Body]:
        with self._lock:
            return [replace(body) for body in self._bodies.values()]

    def set_manual_state(self, circuit_id: int, is_on: bool) -> None:
        """Flip a circuit as a user at the panel would, without logging a command."""

        with self._lock:
            self._require_circuit(circuit_id).is_on = is_on

    def set_circuit_active(self, circuit_id: int, is_active: bool) -> None:
        with self._lock:
            self._require_circuit(circuit_id).is_active = is_active

    # ------------------------------------------------------------------ #
    # EquipmentController                                                #
    # ------------------------------------------------------------------ #

    def get_circuit(self, circuit_id: int) -> Optional[Circuit]:
        with self._lock:
            circuit = self._circuits.get(circuit_id)
            return replace(circuit) if circuit else None

    def get_body_for_circuit(self, circuit_id: int) -> Optional[Body]:
        with self._lock:
            for body in self._bodies.values():
                if body.circuit == circuit_id:
                    return replace(body)
            return None

    def set_circuit_state(self, circuit_id: int, is_on: bool) -> None:
        with self._lock:
            circuit = self._require_circuit(circuit_id)
            circuit.is_on = bool(is_on)
            self._record("circuit", circuit_id, circuit.is_on)
        logger.info("Circuit %s (%s) turned %s", circuit_id, circuit.name or "unnamed", "on" if is_on else "off")

    def set_heat_mode(self, body_id: int, mode: str) -> None:
        with self._lock:
            self._require_body(body_id).heat_mode = mode
            self._record("heat_mode", body_id, mode)
        logger.info("Body %s heat mode set to %s", body_id, mode)

    def set_heat_setpoint(self, body_id: int, value: float) -> None:
        with self._lock:
            self._require_body(body_id).heat_setpoint = value
            self._record("heat_setpoint", body_id, value)
        logger.info("Body %s heat setpoint set to %s", body_id, value)

    def set_cool_setpoint(self, body_id: int, value: float) -> None:
        with self._lock:
            self._require_body(body_id).cool_setpoint = value
            self._record("cool_setpoint", body_id, value)
        logger.info("Body %s cool setpoint set to %s", body_id, value)

    def _require_circuit(self, circuit_id: int) -> Circuit:
        try:
            return self._circuits[circuit_id]
        except KeyError as exc:
            raise EquipmentError(f"No circuit with id {circuit_id}") from exc

    def _require_body(self, body_id: int) -> Body:
        try:
            return self._bodies[body_id]
        except KeyError as exc:
            raise EquipmentError(f"No body with id {body_id}") from exc

    def _record(self, action: str, target: int, value: Any) -> None:
        self.commands.append(EquipmentCommand(action=action, target=target, value=value))


__all__ = ["EquipmentCommand", "SimulatedEquipment"]
