"""Structural interfaces for the services the host provides."""

from .protocols import AccountPort, BankPort, ConsensusPort, DenomResolver, FeeGrantPort

__all__ = [
    "AccountPort",
    "BankPort",
    "ConsensusPort",
    "DenomResolver",
    "FeeGrantPort",
]
