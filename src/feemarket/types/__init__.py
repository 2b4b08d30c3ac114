"""Reusable type definitions for the fee market."""

from .address import BECH32_CHARSET, is_valid_address, validate_address
from .base import CamelModel, Container, StrictBaseModel
from .coin import Coin, Coins, DecCoin, coins_to_str
from .dec import Dec
from .exceptions import (
    ArithmeticOverflowError,
    BlockGasOverflowError,
    DivisionByZeroError,
    FeeGrantDeniedError,
    FeeMarketError,
    InsufficientFeeError,
    InsufficientFundsError,
    InvalidGasLimitError,
    InvalidParamsError,
    InvalidStateError,
    ModuleAccountNotSetError,
    NoFeeCoinsError,
    PortError,
    RefundFailedError,
    SettlementError,
    TooManyFeeCoinsError,
    UnauthorizedError,
    UnknownAddressError,
    UnknownDenomError,
)
from .uint import Uint64

__all__ = [
    # Core types
    "Uint64",
    "Dec",
    "Coin",
    "Coins",
    "DecCoin",
    "coins_to_str",
    "CamelModel",
    "StrictBaseModel",
    "Container",
    "BECH32_CHARSET",
    "is_valid_address",
    "validate_address",
    # Exceptions
    "FeeMarketError",
    "ArithmeticOverflowError",
    "DivisionByZeroError",
    "InvalidParamsError",
    "InvalidStateError",
    "BlockGasOverflowError",
    "InvalidGasLimitError",
    "NoFeeCoinsError",
    "TooManyFeeCoinsError",
    "InsufficientFeeError",
    "UnknownDenomError",
    "InsufficientFundsError",
    "FeeGrantDeniedError",
    "UnknownAddressError",
    "ModuleAccountNotSetError",
    "RefundFailedError",
    "SettlementError",
    "UnauthorizedError",
    "PortError",
]
