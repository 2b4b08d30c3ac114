"""Test helpers for fee market unit tests."""

from __future__ import annotations

from .builders import DENOM, make_address, make_state, make_tx
from .mocks import (
    MockAccounts,
    MockBank,
    MockConsensus,
    MockDenomResolver,
    MockFeeGrant,
)

FEE_COLLECTOR_ADDRESS = make_address(100)
"""Address of the fee collector module account."""

DISTRIBUTION_ADDRESS = make_address(101)
"""Address of the distribution module account."""

AUTHORITY = make_address(102)
"""Address of the parameter-update authority."""

PAYER = make_address(1)
"""Default fee payer."""

__all__ = [
    # Builders
    "make_address",
    "make_state",
    "make_tx",
    # Mocks
    "MockAccounts",
    "MockBank",
    "MockConsensus",
    "MockDenomResolver",
    "MockFeeGrant",
    # Constants
    "AUTHORITY",
    "DENOM",
    "DISTRIBUTION_ADDRESS",
    "FEE_COLLECTOR_ADDRESS",
    "PAYER",
]
