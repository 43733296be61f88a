import json
from pathlib import Path

import pytest

from poolclock.equipment import SimulatedEquipment
from poolclock.errors import ConfigurationInvalid
from poolclock.schedules import HeatSource, ScheduleType, TimeType
from poolclock.store import ScheduleStore, load_schedules, parse_schedules

EXAMPLES = Path(__file__).resolve().parents[1] / "config"


def test_example_schedules_load() -> None:
    store = ScheduleStore.from_path(EXAMPLES / "schedules.example.json")
    assert [schedule.id for schedule in store] == [1, 2, 3, 4]
    assert [schedule.id for schedule in store.masters()] == [1, 2, 3]
    spa = store.get(2)
    assert spa.start_time_type is TimeType.SUNSET
    assert spa.heat_source is HeatSource.ULTRATEMP
    assert spa.cool_setpoint == 95
    assert store.get(3).schedule_type is ScheduleType.RUN_ONCE


def test_example_equipment_loads() -> None:
    equipment = SimulatedEquipment.from_file(EXAMPLES / "equipment.example.json")
    assert equipment.get_circuit(6).name == "Pool"
    assert equipment.get_body_for_circuit(1).name == "Spa"
    assert equipment.get_body_for_circuit(9) is None


def test_numeric_time_types_are_accepted() -> None:
    [schedule] = parse_schedules([{"id": 1, "circuit": 2, "startTimeType": 1, "endTimeType": 2}])
    assert schedule.start_time_type is TimeType.SUNRISE
    assert schedule.end_time_type is TimeType.SUNSET
    [manual] = parse_schedules([{"id": 2, "circuit": 2, "start_time_type": "manual"}])
    assert manual.start_time_type is TimeType.CLOCK


def test_run_once_requires_date() -> None:
    with pytest.raises(ConfigurationInvalid):
        parse_schedules([{"id": 1, "circuit": 2, "scheduleType": "runonce", "startYear": 2024}])


def test_duplicate_ids_rejected() -> None:
    schedules = parse_schedules([{"id": 1, "circuit": 2}, {"id": 1, "circuit": 3}])
    with pytest.raises(ConfigurationInvalid):
        ScheduleStore(schedules)


def test_missing_file_means_no_schedules(tmp_path: Path) -> None:
    assert load_schedules(tmp_path / "absent.json") == []


def test_invalid_json_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "schedules.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationInvalid):
        load_schedules(path)


def test_bare_list_document(tmp_path: Path) -> None:
    path = tmp_path / "schedules.json"
    path.write_text(json.dumps([{"id": 5, "circuit": 1, "master": True}]))
    assert [schedule.id for schedule in load_schedules(path)] == [5]
