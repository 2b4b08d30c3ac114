"""Genesis loading and export for the fee market."""

from .config import GenesisState

__all__ = ["GenesisState"]
