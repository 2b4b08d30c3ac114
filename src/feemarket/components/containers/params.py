"""Fee market parameters."""

from __future__ import annotations

from feemarket.components.chain.config import (
    DEFAULT_AIMD_ALPHA,
    DEFAULT_AIMD_BETA,
    DEFAULT_AIMD_DELTA,
    DEFAULT_AIMD_MAX_LEARNING_RATE,
    DEFAULT_AIMD_MIN_LEARNING_RATE,
    DEFAULT_AIMD_THETA,
    DEFAULT_AIMD_WINDOW,
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    DEFAULT_DELTA,
    DEFAULT_FEE_DENOM,
    DEFAULT_MAX_BLOCK_UTILIZATION,
    DEFAULT_MAX_LEARNING_RATE,
    DEFAULT_MIN_BASE_FEE,
    DEFAULT_MIN_LEARNING_RATE,
    DEFAULT_TARGET_BLOCK_UTILIZATION,
    DEFAULT_THETA,
    DEFAULT_WINDOW,
    MAX_BLOCK_UTILIZATION_RATIO,
)
from feemarket.types import Container, Dec, InvalidParamsError, Uint64


class Params(Container):
    """
    Configuration of the fee market for one epoch.

    Parameters are immutable between authority-approved updates. Every
    update resets the controller state to the new floors.
    """

    # Sliding window
    window: Uint64
    """Length of the sliding window, in blocks."""

    # AIMD learning-rate adaptation
    alpha: Dec
    """Additive learning-rate increment applied outside the target band."""

    beta: Dec
    """Multiplicative learning-rate decay applied inside the target band."""

    theta: Dec
    """Half-width of the target band of average utilization."""

    delta: Dec
    """Base fee adjustment per unit of net window utilization."""

    # Block utilization
    target_block_utilization: Uint64
    """Desired gas consumed per block."""

    max_block_utilization: Uint64
    """Hard per-block gas cap."""

    # Floors and bounds
    min_base_fee: Dec
    """The base fee never drops below this value."""

    min_learning_rate: Dec
    """Lower bound of the learning rate."""

    max_learning_rate: Dec
    """Upper bound of the learning rate."""

    # Denomination and switches
    fee_denom: str
    """Denomination in which the base fee is quoted."""

    enabled: bool
    """Master switch. A disabled market neither adapts nor enforces a floor."""

    distribute_fees: bool = False
    """Forward tips of successful transactions to the block proposer."""

    def is_aimd(self) -> bool:
        """Whether the calibration actually adapts its learning rate."""
        return self.window > Uint64(1) or self.min_learning_rate != self.max_learning_rate

    def validate(self) -> None:
        """
        Check every parameter constraint.

        Constraints are checked in field order and the first violation is
        reported.

        Raises:
            InvalidParamsError: Naming the first violated constraint.
        """
        if self.window == Uint64(0):
            raise InvalidParamsError("window must be greater than 0")

        if self.alpha.is_negative():
            raise InvalidParamsError(f"alpha cannot be negative: {self.alpha}")

        if self.beta.is_negative() or self.beta > Dec.one():
            raise InvalidParamsError(f"beta must be within [0, 1]: {self.beta}")

        if self.theta.is_negative() or self.theta > Dec.one():
            raise InvalidParamsError(f"theta must be within [0, 1]: {self.theta}")

        if self.delta.is_negative():
            raise InvalidParamsError(f"delta cannot be negative: {self.delta}")

        if self.target_block_utilization == Uint64(0):
            raise InvalidParamsError("target block utilization must be greater than 0")

        if self.max_block_utilization < self.target_block_utilization:
            raise InvalidParamsError(
                f"target block utilization of {self.target_block_utilization} cannot be "
                f"greater than max block utilization of {self.max_block_utilization}"
            )

        if int(self.max_block_utilization) > (
            MAX_BLOCK_UTILIZATION_RATIO * int(self.target_block_utilization)
        ):
            raise InvalidParamsError(
                "max block utilization cannot be greater than target block utilization "
                f"times {MAX_BLOCK_UTILIZATION_RATIO}"
            )

        if self.min_base_fee.is_negative():
            raise InvalidParamsError(f"min base fee cannot be negative: {self.min_base_fee}")

        if self.min_learning_rate.is_negative():
            raise InvalidParamsError(
                f"min learning rate cannot be negative: {self.min_learning_rate}"
            )

        if self.max_learning_rate.is_negative():
            raise InvalidParamsError(
                f"max learning rate cannot be negative: {self.max_learning_rate}"
            )

        if self.min_learning_rate > self.max_learning_rate:
            raise InvalidParamsError(
                f"min learning rate of {self.min_learning_rate} cannot be greater than "
                f"max learning rate of {self.max_learning_rate}"
            )

        if not self.fee_denom.strip():
            raise InvalidParamsError("fee denom must be set")


def default_params(fee_denom: str = DEFAULT_FEE_DENOM) -> Params:
    """
    Classic EIP-1559 calibration.

    The learning rate is pinned at 0.125 and only the previous block is
    considered, so the update reduces to Ethereum's base fee rule.
    """
    return Params(
        window=DEFAULT_WINDOW,
        alpha=Dec(DEFAULT_ALPHA),
        beta=Dec(DEFAULT_BETA),
        theta=Dec(DEFAULT_THETA),
        delta=Dec(DEFAULT_DELTA),
        target_block_utilization=DEFAULT_TARGET_BLOCK_UTILIZATION,
        max_block_utilization=DEFAULT_MAX_BLOCK_UTILIZATION,
        min_base_fee=Dec(DEFAULT_MIN_BASE_FEE),
        min_learning_rate=Dec(DEFAULT_MIN_LEARNING_RATE),
        max_learning_rate=Dec(DEFAULT_MAX_LEARNING_RATE),
        fee_denom=fee_denom,
        enabled=True,
    )


def default_aimd_params(fee_denom: str = DEFAULT_FEE_DENOM) -> Params:
    """Adaptive calibration over an 8-block window."""
    return Params(
        window=DEFAULT_AIMD_WINDOW,
        alpha=Dec(DEFAULT_AIMD_ALPHA),
        beta=Dec(DEFAULT_AIMD_BETA),
        theta=Dec(DEFAULT_AIMD_THETA),
        delta=Dec(DEFAULT_AIMD_DELTA),
        target_block_utilization=DEFAULT_TARGET_BLOCK_UTILIZATION,
        max_block_utilization=DEFAULT_MAX_BLOCK_UTILIZATION,
        min_base_fee=Dec(DEFAULT_MIN_BASE_FEE),
        min_learning_rate=Dec(DEFAULT_AIMD_MIN_LEARNING_RATE),
        max_learning_rate=Dec(DEFAULT_AIMD_MAX_LEARNING_RATE),
        fee_denom=fee_denom,
        enabled=True,
    )
