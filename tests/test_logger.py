import logging

from poolclock.config import AppSettings
from poolclock.logger import LOGGER_NAME, _LevelToggleFilter, configure_logging, get_logger


def _record(level: int) -> logging.LogRecord:
    return logging.LogRecord("poolclock.test", level, __file__, 1, "message", None, None)


def test_level_toggles_drop_disabled_levels() -> None:
    settings = AppSettings(log_info_enabled=False, log_debug_enabled=True, log_error_enabled=False)
    toggles = _LevelToggleFilter(settings)
    assert toggles.filter(_record(logging.WARNING)) is True
    assert toggles.filter(_record(logging.INFO)) is False
    assert toggles.filter(_record(logging.DEBUG)) is True
    assert toggles.filter(_record(logging.CRITICAL)) is False


def test_get_logger_scopes_under_package_namespace() -> None:
    assert get_logger().name == LOGGER_NAME
    assert get_logger("poolclock.schedules").name == "poolclock.schedules"
    assert get_logger("plugins").name == "poolclock.plugins"


def test_configure_logging_keeps_single_handler() -> None:
    root = configure_logging(AppSettings(), force=True)
    configure_logging(AppSettings(log_debug_enabled=True))
    assert len(root.handlers) == 1
    assert root.propagate is False
