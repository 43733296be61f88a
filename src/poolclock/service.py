"""Wire settings, configuration store, equipment and scheduler together."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import AppSettings, get_settings
from .equipment import SimulatedEquipment
from .errors import ConfigurationInvalid
from .logger import get_logger
from .schedules import ScheduleCollection, SchedulerLoop, build_schedule_days
from .sources import AstralSunSource, FixedSunSource, SunSource, SystemClock, resolve_timezone
from .store import ScheduleStore

logger = get_logger(__name__)


@dataclass
class SchedulerService:
    """Everything the API and CLI need to drive schedules."""

    settings: AppSettings
    store: ScheduleStore
    equipment: SimulatedEquipment
    collection: ScheduleCollection
    loop: SchedulerLoop

    def start(self) -> None:
        self.loop.start()

    def stop(self) -> None:
        self.loop.stop()
        self.collection.close()


def build_sun_source(settings: AppSettings) -> SunSource:
    tz = resolve_timezone(settings.timezone)
    if settings.latitude is None or settings.longitude is None:
        logger.warning("No site coordinates configured; sunrise/sunset schedules will stay off")
        return FixedSunSource(tz=tz)
    return AstralSunSource(settings.latitude, settings.longitude, tz)


def build_service(settings: Optional[AppSettings] = None) -> SchedulerService:
    """Load configuration from ``settings`` and create a ready-to-start service."""

    settings = settings or get_settings()
    try:
        days = build_schedule_days(settings.schedule_day_bits)
    except ValueError as exc:
        raise ConfigurationInvalid(str(exc)) from exc

    store = ScheduleStore.from_path(settings.schedules_path)
    equipment = SimulatedEquipment.from_file(settings.equipment_path)
    collection = ScheduleCollection(
        equipment,
        clock=SystemClock(resolve_timezone(settings.timezone)),
        sun_source=build_sun_source(settings),
        lookup=store.get,
        days=days,
    )
    added = collection.initialize_from_config(store)
    logger.info("Controlling %d of %d configured schedules", added, len(store))
    loop = SchedulerLoop(collection, settings.poll_interval_seconds)
    return SchedulerService(settings=settings, store=store, equipment=equipment, collection=collection, loop=loop)


__all__ = ["SchedulerService", "build_service", "build_sun_source"]
