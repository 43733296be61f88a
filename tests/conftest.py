from __future__ import annotations

from datetime import datetime, time
from typing import Any, Callable, Set

import pytest

from poolclock.equipment import Body, Circuit, EquipmentError, SimulatedEquipment
from poolclock.schedules import ScheduleCollection, ScheduleConfig
from poolclock.sources import FixedClock, FixedSunSource

# Wednesday; the default weekday bit for Wednesday is 16.
WEDNESDAY = datetime(2024, 6, 5, 8, 1)
WEDNESDAY_BIT = 16
SUNRISE = time(6, 15)
SUNSET = time(20, 30)


class FlakyEquipment(SimulatedEquipment):
    """Simulated equipment whose circuit commands fail for selected ids."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.failing_circuits: Set[int] = set()
        self.failing_bodies: Set[int] = set()

    def set_circuit_state(self, circuit_id: int, is_on: bool) -> None:
        if circuit_id in self.failing_circuits:
            raise EquipmentError(f"Circuit {circuit_id} did not respond")
        super().set_circuit_state(circuit_id, is_on)

    def set_heat_mode(self, body_id: int, mode: str) -> None:
        if body_id in self.failing_bodies:
            raise EquipmentError(f"Body {body_id} heater offline")
        super().set_heat_mode(body_id, mode)


def make_schedule(**overrides: Any) -> ScheduleConfig:
    data = {
        "id": 1,
        "circuit": 5,
        "master": True,
        "schedule_type": "repeat",
        "schedule_days": WEDNESDAY_BIT,
        "start_time_type": "clock",
        "start_time": 8 * 60,
        "end_time_type": "sunset",
        "heat_source": "heat",
        "heat_setpoint": 85,
    }
    data.update(overrides)
    return ScheduleConfig.model_validate(data)


@pytest.fixture()
def schedule_factory() -> Callable[..., ScheduleConfig]:
    return make_schedule


@pytest.fixture()
def equipment() -> FlakyEquipment:
    return FlakyEquipment(
        circuits=[
            Circuit(id=5, name="Pool"),
            Circuit(id=6, name="Spa"),
            Circuit(id=7, name="Cleaner"),
        ],
        bodies=[
            Body(id=1, name="Pool", circuit=5),
            Body(id=2, name="Spa", circuit=6),
        ],
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(WEDNESDAY)


@pytest.fixture()
def sun_source() -> FixedSunSource:
    return FixedSunSource(sunrise=SUNRISE, sunset=SUNSET)


@pytest.fixture()
def collection(equipment: FlakyEquipment, clock: FixedClock, sun_source: FixedSunSource) -> ScheduleCollection:
    return ScheduleCollection(equipment, clock=clock, sun_source=sun_source)
