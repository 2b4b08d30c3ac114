"""
The container types for the fee market.

All containers are frozen pydantic models with a canonical JSON encoding,
so a container decoded from storage always equals the one that was stored.
"""

from .event import Event, EventManager
from .params import Params, default_aimd_params, default_params
from .state import State
from .tx import Tx

__all__ = [
    "Event",
    "EventManager",
    "Params",
    "State",
    "Tx",
    "default_aimd_params",
    "default_params",
]
