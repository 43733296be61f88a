"""FastAPI factory serving schedule status next to the background scheduling loop."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from .. import __version__
from ..config import AppSettings, get_settings
from ..logger import configure_logging, get_logger
from ..service import build_service
from . import routes


def create_application(settings: Optional[AppSettings] = None) -> FastAPI:
    """Load configuration, build the scheduler service and attach it to a new app.

    The loop is started on application startup when ``scheduler_enabled`` is
    set and is always stopped on shutdown.
    """

    settings = settings or get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)

    service = build_service(settings)
    app = FastAPI(
        title="PoolClock Scheduler API",
        version=__version__,
        summary="Schedule state and equipment status for the PoolClock controller.",
    )
    app.state.settings = settings
    app.state.service = service

    if settings.scheduler_enabled:
        app.add_event_handler("startup", service.start)
    else:
        logger.info("Scheduling loop disabled; ticks only run through POST /api/tick")
    app.add_event_handler("shutdown", service.stop)

    app.include_router(routes.router)
    logger.info(
        "PoolClock API ready (%d schedules, interval=%ss)",
        len(service.collection),
        settings.poll_interval_seconds,
    )
    return app
