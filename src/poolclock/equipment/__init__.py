"""Equipment collaborators for the PoolClock scheduler."""

from ..logger import get_logger
from .base import Body, Circuit, EquipmentController, EquipmentError
from .simulated import EquipmentCommand, SimulatedEquipment

get_logger(__name__).debug("Equipment package loaded")

__all__ = [
    "Body",
    "Circuit",
    "EquipmentCommand",
    "EquipmentController",
    "EquipmentError",
    "SimulatedEquipment",
]
