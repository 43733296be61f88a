"""Logging setup shared by the scheduler loop, the API server and the CLI.

Every module logs below the ``poolclock`` namespace. Records go to stderr so
that commands printing JSON reports on stdout stay machine readable, and each
line carries the thread name so scheduler-loop output can be told apart from
request handling.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Tuple

from .config import AppSettings, get_settings

LOGGER_NAME = "poolclock"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Lowest level first matching wins; anything below INFO falls back to debug.
_LEVEL_TOGGLES: Tuple[Tuple[int, str], ...] = (
    (logging.ERROR, "log_error_enabled"),
    (logging.WARNING, "log_warning_enabled"),
    (logging.INFO, "log_info_enabled"),
)


class _LevelToggleFilter(logging.Filter):
    """Drop records whose level is switched off in the settings."""

    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self.settings = settings

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for threshold, toggle in _LEVEL_TOGGLES:
            if record.levelno >= threshold:
                return bool(getattr(self.settings, toggle))
        return self.settings.log_debug_enabled


_handler: Optional[logging.Handler] = None
_filter: Optional[_LevelToggleFilter] = None


def configure_logging(settings: Optional[AppSettings] = None, *, force: bool = False) -> logging.Logger:
    """Attach the stderr handler to the ``poolclock`` logger.

    Calling again only swaps the settings seen by the level filter unless
    ``force`` is set, in which case the handler is rebuilt.
    """

    global _handler, _filter
    settings = settings or get_settings()
    root = logging.getLogger(LOGGER_NAME)

    if _handler is not None and not force:
        if _filter is not None:
            _filter.settings = settings
        return root

    if _handler is not None:
        root.removeHandler(_handler)

    _filter = _LevelToggleFilter(settings)
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setLevel(logging.DEBUG)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    _handler.addFilter(_filter)

    root.setLevel(logging.DEBUG)
    root.addHandler(_handler)
    root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``name`` as a child of the ``poolclock`` logger."""

    configure_logging()
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    prefix = f"{LOGGER_NAME}."
    return logging.getLogger(name if name.startswith(prefix) else prefix + name)
