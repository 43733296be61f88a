"""Background loop that drives scheduling ticks on a single shared timer."""

from __future__ import annotations

import threading
from typing import Any, Dict, Optional

from ..config import DEFAULT_POLL_INTERVAL_SECONDS
from ..logger import get_logger
from .collection import ScheduleCollection, TickReport

logger = get_logger(__name__)


class SchedulerLoop:
    """Run :meth:`ScheduleCollection.run_tick` every ``interval_seconds``."""

    def __init__(self, collection: ScheduleCollection, interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._collection = collection
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_report: Optional[TickReport] = None
        self._tick_count = 0

    # --------------------------------------------------------------------- #
    # Lifecycle                                                             #
    # --------------------------------------------------------------------- #

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            logger.debug("SchedulerLoop already started")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="poolclock-scheduler", daemon=True)
        self._thread.start()
        logger.info("Scheduler loop started (interval=%ss)", self._interval)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Scheduler loop did not stop within %ss", timeout)
        self._thread = None
        logger.info("Scheduler loop stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # --------------------------------------------------------------------- #
    # Ticking                                                               #
    # --------------------------------------------------------------------- #

    def _loop(self) -> None:
        logger.debug("Scheduler loop active")
        while not self._stop_event.is_set():
            self.tick()
            self._stop_event.wait(timeout=self._interval)
        logger.debug("Scheduler loop finished")

    def tick(self) -> Optional[TickReport]:
        """Run one tick now; errors are logged so the loop keeps going."""

        try:
            report = self._collection.run_tick()
        except Exception as exc:
            logger.exception("Error triggering schedules: %s", exc)
            return None
        self._last_report = report
        self._tick_count += 1
        return report

    def status(self) -> Dict[str, Any]:
        return {
            "running": self.running,
            "interval_seconds": self._interval,
            "tick_count": self._tick_count,
            "last_tick": self._last_report.to_dict() if self._last_report else None,
        }


__all__ = ["SchedulerLoop"]
