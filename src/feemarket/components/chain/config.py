"""
Fee Market Chain Configuration

This file defines the module identifiers, hard limits and the two preset
calibrations of the fee market: classic EIP-1559 and AIMD EIP-1559.
"""

from typing_extensions import Final

from feemarket.types import Uint64

# --- Module Identity ---

MODULE_NAME: Final = "feemarket"
"""Name of the fee market module; also the root of its storage keyspace."""

FEE_COLLECTOR_NAME: Final = "feemarket-fee-collector"
"""Module account escrowing fees between deduction and refund."""

DISTRIBUTION_MODULE_NAME: Final = "fee_collector"
"""Module account receiving distributed tips when no proposer is known."""

DEFAULT_FEE_DENOM: Final = "stake"
"""Default bond denomination used to quote the base fee."""

DEFAULT_BECH32_PREFIX: Final = "cosmos"
"""Default human-readable part of account addresses."""

# --- Hard Limits ---

MAX_BLOCK_UTILIZATION_RATIO: Final = 10
"""The max block utilization may be at most this multiple of the target."""

MAX_INT64: Final = 2**63 - 1
"""Upper bound of transaction priorities, inherited from the host's int64 typing."""

# --- Classic EIP-1559 Calibration ---
#
# Same values as Ethereum. Alpha, beta, theta and delta are inert here:
# the learning rate is pinned by equal bounds and only the previous block
# is considered.

DEFAULT_WINDOW: Final = Uint64(1)
"""Only the previous block is considered."""

DEFAULT_ALPHA: Final = "0.0"
DEFAULT_BETA: Final = "1.0"
DEFAULT_THETA: Final = "0.0"
DEFAULT_DELTA: Final = "0.0"

DEFAULT_TARGET_BLOCK_UTILIZATION: Final = Uint64(15_000_000)
"""Target gas consumed per block."""

DEFAULT_MAX_BLOCK_UTILIZATION: Final = Uint64(30_000_000)
"""Hard per-block gas cap."""

DEFAULT_MIN_BASE_FEE: Final = "1000000000"
"""
Minimum base fee.

Ethereum is denominated in 1e18 wei; chains with 6-decimal tokens will
want to lower this.
"""

DEFAULT_MIN_LEARNING_RATE: Final = "0.125"
DEFAULT_MAX_LEARNING_RATE: Final = "0.125"

# --- AIMD EIP-1559 Calibration ---

DEFAULT_AIMD_WINDOW: Final = Uint64(8)
"""Number of recent blocks averaged by the learning-rate update."""

DEFAULT_AIMD_ALPHA: Final = "0.025"
"""Additive learning-rate increase outside the target band."""

DEFAULT_AIMD_BETA: Final = "0.95"
"""Multiplicative learning-rate decrease inside the target band."""

DEFAULT_AIMD_THETA: Final = "0.25"
"""
Target band half-width.

The learning rate grows when average utilization is at most 0.25 or at
least 0.75, and decays otherwise.
"""

DEFAULT_AIMD_DELTA: Final = "0.0001"
"""Base fee kicker per unit of net window utilization."""

DEFAULT_AIMD_MIN_LEARNING_RATE: Final = "0.01"
DEFAULT_AIMD_MAX_LEARNING_RATE: Final = "0.50"
