"""State-specific types for the fee market."""

from __future__ import annotations

from typing import Any, Iterable

from feemarket.types import Uint64

Window = tuple[Uint64, ...]
"""Ring buffer of gas consumed per block, oldest entries overwritten first."""


def zero_window(length: Uint64 | int) -> Window:
    """A window of `length` empty blocks."""
    return tuple(Uint64(0) for _ in range(int(length)))


def coerce_window(value: Any) -> Any:
    """
    Accept a list of gas amounts as a window.

    Genesis documents hand over lists; the stored window is always a tuple.
    Entries are checked by the `Uint64` validator.
    """
    if isinstance(value, list):
        return tuple(value)
    return value


def window_sum(window: Iterable[Uint64]) -> int:
    """Total gas recorded in the window, as an unbounded integer."""
    return sum(int(gas) for gas in window)
