"""Exception types shared across PoolClock."""

from __future__ import annotations


class PoolClockError(RuntimeError):
    """Base class for scheduling core failures."""


class ConfigurationInvalid(PoolClockError):
    """Raised when schedule or equipment configuration cannot be used."""


class TimeResolutionUnavailable(PoolClockError):
    """Raised when an astronomical time is not known for the requested day."""


class EquipmentError(PoolClockError):
    """Raised when the equipment layer rejects or fails a command."""


class ScheduleInvariantError(PoolClockError):
    """Raised when a schedule runtime finds itself in an impossible state."""


class ScheduleNotFoundError(PoolClockError):
    """Raised when a schedule id is not known to the configuration store."""


__all__ = [
    "PoolClockError",
    "ConfigurationInvalid",
    "TimeResolutionUnavailable",
    "EquipmentError",
    "ScheduleInvariantError",
    "ScheduleNotFoundError",
]
