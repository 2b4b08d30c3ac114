"""State container and update engine of the fee market."""

from __future__ import annotations

from pydantic import field_validator

from feemarket.types import (
    BlockGasOverflowError,
    Container,
    Dec,
    InvalidStateError,
    Uint64,
)

from ..params import Params
from .types import Window, coerce_window, window_sum, zero_window


class State(Container):
    """
    The adaptive base fee controller state.

    The window is a ring buffer of gas consumed per block. `index` points at
    the entry of the block currently being executed. Every transition
    returns a new `State`; the stored snapshot is never modified in place.
    """

    # Sliding window
    window: Window
    """Gas consumed by each of the last `params.window` blocks."""

    index: Uint64
    """Position of the current block in the window."""

    # Prices
    base_fee: Dec
    """Current minimum per-gas price."""

    min_base_fee: Dec
    """Floor of the base fee, captured at the last parameter update."""

    learning_rate: Dec
    """Current adaptation coefficient."""

    # Epoch snapshot of the block limits
    target_block_utilization: Uint64
    """Desired gas per block."""

    max_block_utilization: Uint64
    """Hard per-block gas cap."""

    @field_validator("window", mode="before")
    @classmethod
    def _coerce_window(cls, value: object) -> object:
        return coerce_window(value)

    @classmethod
    def generate_genesis(cls, params: Params) -> State:
        """
        Generate the initial state for `params`.

        The base fee and learning rate start at their floors and the window
        holds `params.window` empty blocks.

        Parameters
        ----------
        params : Params
            The parameters the state is seeded from.

        Returns:
        -------
        State
            A state satisfying every invariant for `params`.
        """
        return cls(
            window=zero_window(params.window),
            index=Uint64(0),
            base_fee=params.min_base_fee,
            min_base_fee=params.min_base_fee,
            learning_rate=params.min_learning_rate,
            target_block_utilization=params.target_block_utilization,
            max_block_utilization=params.max_block_utilization,
        )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, params: Params) -> None:
        """
        Check the state invariants against `params`.

        Raises:
            InvalidStateError: Naming the first violated invariant.
        """
        if len(self.window) != int(params.window):
            raise InvalidStateError(
                f"window length {len(self.window)} does not match params window {params.window}"
            )

        if int(self.index) >= len(self.window):
            raise InvalidStateError(
                f"index {self.index} is out of bounds for a window of {len(self.window)}"
            )

        if self.target_block_utilization == Uint64(0):
            raise InvalidStateError("target block utilization must be greater than 0")

        if self.target_block_utilization > self.max_block_utilization:
            raise InvalidStateError(
                f"target block utilization of {self.target_block_utilization} cannot be "
                f"greater than max block utilization of {self.max_block_utilization}"
            )

        for position, gas in enumerate(self.window):
            if gas > self.max_block_utilization:
                raise InvalidStateError(
                    f"window entry {position} of {gas} exceeds max block utilization "
                    f"of {self.max_block_utilization}"
                )

        if self.min_base_fee.is_negative():
            raise InvalidStateError(f"min base fee cannot be negative: {self.min_base_fee}")

        if self.base_fee < self.min_base_fee:
            raise InvalidStateError(
                f"base fee of {self.base_fee} is below min base fee of {self.min_base_fee}"
            )

        if not params.min_learning_rate <= self.learning_rate <= params.max_learning_rate:
            raise InvalidStateError(
                f"learning rate of {self.learning_rate} is outside "
                f"[{params.min_learning_rate}, {params.max_learning_rate}]"
            )

    # -------------------------------------------------------------------------
    # Gas accounting
    # -------------------------------------------------------------------------

    @property
    def current_block_utilization(self) -> Uint64:
        """Gas recorded so far for the current block."""
        return self.window[int(self.index)]

    def record_gas(self, gas_used: Uint64) -> State:
        """
        Add `gas_used` to the current block's entry.

        Raises:
            BlockGasOverflowError: If the block would exceed its gas cap.
        """
        position = int(self.index)
        utilization = int(self.window[position]) + int(gas_used)
        if utilization > int(self.max_block_utilization):
            raise BlockGasOverflowError(utilization, int(self.max_block_utilization))

        window = self.window[:position] + (Uint64(utilization),) + self.window[position + 1 :]
        return self.model_copy(update={"window": window})

    def advance_window(self) -> State:
        """Move to the next block, clearing the entry it will overwrite."""
        position = (int(self.index) + 1) % len(self.window)
        window = self.window[:position] + (Uint64(0),) + self.window[position + 1 :]
        return self.model_copy(update={"window": window, "index": Uint64(position)})

    def net_utilization(self) -> int:
        """
        Signed distance of the window from its target: `sum(gas_i - target)`.

        Positive when the window consumed more gas than targeted.
        """
        target = int(self.target_block_utilization)
        return window_sum(self.window) - target * len(self.window)

    def average_utilization(self) -> Dec:
        """Share of the window's total capacity that was consumed, in [0, 1]."""
        capacity = int(self.max_block_utilization) * len(self.window)
        return Dec(window_sum(self.window)) / Dec(capacity)

    # -------------------------------------------------------------------------
    # Update engine
    # -------------------------------------------------------------------------

    def update_learning_rate(self, params: Params) -> State:
        """
        Apply the AIMD rule to the learning rate.

        When average utilization leaves the target band
        `(theta, 1 - theta)` the learning rate grows additively by `alpha`
        up to `max_learning_rate`. Inside the band it decays
        multiplicatively by `beta` down to `min_learning_rate`.
        """
        utilization = self.average_utilization()

        if utilization <= params.theta or utilization >= Dec.one() - params.theta:
            learning_rate = min(self.learning_rate + params.alpha, params.max_learning_rate)
        else:
            learning_rate = max(self.learning_rate * params.beta, params.min_learning_rate)

        return self.model_copy(update={"learning_rate": learning_rate})

    def update_base_fee(self, params: Params) -> State:
        """
        Recompute the base fee from the current block and the window.

        The fee moves by `learning_rate` times the relative distance of the
        current block from its target, then by `delta` per unit of net
        window utilization. It never drops below the floor.
        """
        target = Dec(int(params.target_block_utilization))
        current = Dec(int(self.current_block_utilization))

        utilization_ratio = (current - target) / target
        adjustment = Dec.one() + self.learning_rate * utilization_ratio
        net_adjustment = Dec(self.net_utilization()) * params.delta

        base_fee = self.base_fee * adjustment + net_adjustment
        return self.model_copy(update={"base_fee": max(base_fee, self.min_base_fee)})

    def process_block(self, params: Params) -> State:
        """
        Run the end-of-block sequence.

        The learning rate is updated first so the base fee reacts with the
        new coefficient, then the window moves to the next block.
        """
        return self.update_learning_rate(params).update_base_fee(params).advance_window()
