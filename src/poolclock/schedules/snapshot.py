"""Immutable view of time and equipment state shared by one scheduling tick."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..equipment.base import Body, Circuit, EquipmentController
from ..errors import EquipmentError
from ..logger import get_logger
from ..sources import SunSource, SunTimes

logger = get_logger(__name__)


@dataclass(frozen=True)
class TickSnapshot:
    """Everything a schedule may read while it is evaluated.

    ``circuits`` and ``bodies`` are keyed by circuit id and only hold the
    circuits referenced by the schedules being evaluated.
    """

    now: datetime
    sun_times: SunTimes
    circuits: Mapping[int, Circuit] = field(default_factory=dict)
    bodies: Mapping[int, Body] = field(default_factory=dict)

    @property
    def today(self) -> date:
        return self.now.date()

    @property
    def start_of_day(self) -> datetime:
        return datetime.combine(self.today, time(), tzinfo=self.now.tzinfo)

    @property
    def weekday(self) -> int:
        return self.now.weekday()

    def circuit(self, circuit_id: int) -> Optional[Circuit]:
        return self.circuits.get(circuit_id)

    def body_for_circuit(self, circuit_id: int) -> Optional[Body]:
        return self.bodies.get(circuit_id)

    @classmethod
    def capture(
        cls,
        now: datetime,
        sun_source: SunSource,
        equipment: EquipmentController,
        circuit_ids: Iterable[int],
    ) -> "TickSnapshot":
        """Read sun times and every referenced circuit once for the whole tick."""

        circuits: dict[int, Circuit] = {}
        bodies: dict[int, Body] = {}
        for circuit_id in dict.fromkeys(circuit_ids):
            try:
                circuit = equipment.get_circuit(circuit_id)
                body = equipment.get_body_for_circuit(circuit_id)
            except EquipmentError as exc:
                logger.warning("Unable to read circuit %s for this tick: %s", circuit_id, exc)
                continue
            if circuit is not None:
                circuits[circuit_id] = circuit
            if body is not None:
                bodies[circuit_id] = body
        return cls(
            now=now,
            sun_times=sun_source.sun_times(now.date()),
            circuits=MappingProxyType(circuits),
            bodies=MappingProxyType(bodies),
        )


__all__ = ["TickSnapshot"]
