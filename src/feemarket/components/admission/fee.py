"""
Fee Admission.

Decides whether a transaction offers enough fee for its gas limit at the
current base fee, and splits the offered fee into the required part and
the tip.

    required = ceil(gas_price * gas_limit)
    tip      = offered - required
    priority = offered // gas_limit
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from feemarket.components.chain.config import MAX_INT64
from feemarket.components.containers import Params, State
from feemarket.components.ports import DenomResolver
from feemarket.types import (
    Coin,
    Coins,
    DecCoin,
    InsufficientFeeError,
    InvalidGasLimitError,
    NoFeeCoinsError,
    TooManyFeeCoinsError,
    Uint64,
    UnknownDenomError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeeCheck:
    """Outcome of a successful fee check."""

    required: Coin
    """Part of the fee covering `gas_price * gas_limit`."""

    tip: Coin
    """Part of the fee offered above the requirement."""

    priority: int
    """Mempool ordering score in [0, MAX_INT64]."""

    gas_price: DecCoin | None
    """Per-gas price the requirement was computed with. None when the floor was bypassed."""


def resolve_gas_price(
    params: Params, state: State, denom: str, resolver: DenomResolver | None = None
) -> DecCoin:
    """
    The base fee expressed in `denom`.

    Raises:
        UnknownDenomError: If `denom` differs from the fee denomination and
            cannot be converted.
    """
    base_price = DecCoin(denom=params.fee_denom, amount=state.base_fee)
    if denom == params.fee_denom:
        return base_price

    if resolver is None:
        raise UnknownDenomError(f"no resolver to convert {params.fee_denom} to {denom}")

    price = resolver.convert(base_price, denom)
    if price.denom != denom:
        raise UnknownDenomError(f"resolver returned {price.denom}, expected {denom}")
    return price


def fee_for_gas(gas_price: DecCoin, gas: Uint64 | int) -> Coin:
    """Cost of `gas` units at `gas_price`, rounded up to a whole coin."""
    return Coin(denom=gas_price.denom, amount=(gas_price.amount * int(gas)).ceil_int())


def required_fee(
    params: Params,
    state: State,
    gas_limit: Uint64,
    denom: str,
    resolver: DenomResolver | None = None,
) -> Coin:
    """Minimum fee for `gas_limit` paid in `denom`, rounded up."""
    return fee_for_gas(resolve_gas_price(params, state, denom, resolver), gas_limit)


def get_tx_priority(fee_amount: int, gas_limit: Uint64 | int) -> int:
    """
    Mempool priority: the offered price per unit of gas.

    Clamped into [0, MAX_INT64]. A zero gas limit yields priority 0.
    """
    if int(gas_limit) == 0:
        return 0
    return max(0, min(fee_amount // int(gas_limit), MAX_INT64))


def check_tx_fee(
    tx_fee: Coins,
    gas_limit: Uint64,
    state: State,
    params: Params,
    resolver: DenomResolver | None = None,
    *,
    simulate: bool = False,
    height: int = 1,
) -> FeeCheck:
    """
    Check the offered fee against the current base fee.

    Simulation and a disabled market accept any single-coin fee: the
    offered amount becomes the requirement and the tip is zero.

    Args:
        tx_fee: Fee coins declared by the transaction.
        gas_limit: Gas limit declared by the transaction.
        state: Current controller state.
        params: Current parameters.
        resolver: Converter for fees paid outside the fee denomination.
        simulate: Whether the transaction is only being simulated.
        height: Current block height. Genesis transactions may carry no gas.

    Raises:
        InvalidGasLimitError: Zero gas limit outside simulation and genesis.
        NoFeeCoinsError: No fee coin offered.
        TooManyFeeCoinsError: Fee offered in more than one denomination.
        InsufficientFeeError: Offered amount below the requirement.
        UnknownDenomError: Fee denomination cannot be priced.
    """
    if not simulate and height > 0 and int(gas_limit) == 0:
        raise InvalidGasLimitError("must provide positive gas")

    if len(tx_fee) == 0:
        raise NoFeeCoinsError()
    if len(tx_fee) > 1:
        raise TooManyFeeCoinsError(len(tx_fee))

    offered = tx_fee[0]

    if simulate or not params.enabled:
        return FeeCheck(
            required=offered,
            tip=Coin.zero(offered.denom),
            priority=get_tx_priority(offered.amount, gas_limit),
            gas_price=None,
        )

    gas_price = resolve_gas_price(params, state, offered.denom, resolver)
    required = fee_for_gas(gas_price, gas_limit)

    if offered.amount < required.amount:
        logger.debug("Rejecting fee %s below required %s", offered, required)
        raise InsufficientFeeError(required=required, got=offered)

    check = FeeCheck(
        required=required,
        tip=offered.sub(required),
        priority=get_tx_priority(offered.amount, gas_limit),
        gas_price=gas_price,
    )
    logger.debug(
        "Accepted fee %s: required %s, tip %s, priority %d",
        offered,
        check.required,
        check.tip,
        check.priority,
    )
    return check
