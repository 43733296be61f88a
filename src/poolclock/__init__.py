"""PoolClock: schedule controller for pool and spa circuits and heaters."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("poolclock")
except PackageNotFoundError:  # source checkout without installed metadata
    __version__ = "0.0.0"

__all__ = ["__version__"]
