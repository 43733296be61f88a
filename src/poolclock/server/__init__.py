"""FastAPI status server and CLI for PoolClock."""

from .app import create_application

__all__ = ["create_application"]
