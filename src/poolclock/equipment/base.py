"""Equipment-control interface consumed by the scheduling core."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Protocol

from ..errors import EquipmentError


@dataclass(slots=True)
class Circuit:
    """Addressable output (relay, feature) that can be switched on or off."""

    id: int
    name: str = ""
    is_active: bool = True
    is_on: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class Body:
    """Heated zone such as a pool or spa, driven by one circuit."""

    id: int
    circuit: int
    name: str = ""
    heat_mode: str = "off"
    heat_setpoint: Optional[float] = None
    cool_setpoint: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class EquipmentController(Protocol):
    """Outward calls the scheduler makes against the controlled equipment.

    Implementations raise :class:`~poolclock.errors.EquipmentError` when a
    command cannot be carried out. Lookups return ``None`` for unknown ids.
    """

    def get_circuit(self, circuit_id: int) -> Optional[Circuit]:
        ...

    def get_body_for_circuit(self, circuit_id: int) -> Optional[Body]:
        ...

    def set_circuit_state(self, circuit_id: int, is_on: bool) -> None:
        ...

    def set_heat_mode(self, body_id: int, mode: str) -> None:
        ...

    def set_heat_setpoint(self, body_id: int, value: float) -> None:
        ...

    def set_cool_setpoint(self, body_id: int, value: float) -> None:
        ...


__all__ = ["Body", "Circuit", "EquipmentController", "EquipmentError"]
