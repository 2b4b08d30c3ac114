"""State container and related types for the fee market."""

from .state import State
from .types import Window, coerce_window, window_sum, zero_window

__all__ = [
    "State",
    "Window",
    "coerce_window",
    "window_sum",
    "zero_window",
]
