"""Read-only schedule configuration store backed by a JSON file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import TypeAdapter, ValidationError

from .errors import ConfigurationInvalid
from .logger import get_logger
from .schedules.models import ScheduleConfig

logger = get_logger(__name__)

_SCHEDULES_ADAPTER = TypeAdapter(List[ScheduleConfig])


def parse_schedules(data: Any) -> List[ScheduleConfig]:
    """Validate either ``{"schedules": [...]}`` or a bare list of schedule records."""

    if isinstance(data, dict):
        data = data.get("schedules", [])
    try:
        return _SCHEDULES_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ConfigurationInvalid(f"Invalid schedule definitions: {exc}") from exc


def load_schedules(path: Path) -> List[ScheduleConfig]:
    """Load schedules from ``path``; a missing file means no schedules."""

    if not path.exists():
        logger.warning("Schedule file %s not found; no schedules loaded", path)
        return []
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationInvalid(f"Schedule file {path} is not valid JSON: {exc}") from exc
    schedules = parse_schedules(data)
    logger.info("Loaded %d schedules from %s", len(schedules), path)
    return schedules


class ScheduleStore:
    """Ordered schedule records with lookup by id."""

    def __init__(self, schedules: Iterable[ScheduleConfig] = ()) -> None:
        self._schedules: Dict[int, ScheduleConfig] = {}
        for schedule in schedules:
            if schedule.id in self._schedules:
                raise ConfigurationInvalid(f"Duplicate schedule id {schedule.id}")
            self._schedules[schedule.id] = schedule

    @classmethod
    def from_path(cls, path: Path) -> "ScheduleStore":
        return cls(load_schedules(path))

    def __len__(self) -> int:
        return len(self._schedules)

    def __iter__(self) -> Iterator[ScheduleConfig]:
        return iter(self._schedules.values())

    def get(self, schedule_id: int) -> Optional[ScheduleConfig]:
        return self._schedules.get(schedule_id)

    def masters(self) -> List[ScheduleConfig]:
        """Schedules flagged as under this controller's control."""

        return [schedule for schedule in self._schedules.values() if schedule.master]


__all__ = ["ScheduleStore", "load_schedules", "parse_schedules"]
