"""The fee market keeper: genesis, block hooks, parameter updates and the tx path."""

from .keeper import FeeMarketKeeper

__all__ = ["FeeMarketKeeper"]
