"""Exception hierarchy for the fee market."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .coin import Coin


class FeeMarketError(Exception):
    """
    Base exception for all fee market errors.

    Every error crossing the module boundary carries a stable kind tag
    plus a human-readable reason.

    Attributes:
        message: Human-readable error description.
    """

    KIND: ClassVar[str] = "FeeMarket"
    """Stable tag identifying the error kind."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    @property
    def kind(self) -> str:
        """The stable kind tag of this error."""
        return self.KIND

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


# -----------------------------------------------------------------------------
# Arithmetic
# -----------------------------------------------------------------------------


class ArithmeticOverflowError(FeeMarketError):
    """
    Raised when a fixed-point value exceeds the supported magnitude.

    Attributes:
        bit_length: Bit length of the offending scaled value.
        max_bit_length: Largest bit length a value may have.
    """

    KIND = "ArithmeticOverflow"

    def __init__(self, bit_length: int, max_bit_length: int) -> None:
        self.bit_length = bit_length
        self.max_bit_length = max_bit_length
        super().__init__(
            f"decimal out of range: {bit_length} bits exceeds the {max_bit_length}-bit limit"
        )


class DivisionByZeroError(FeeMarketError):
    """Raised when dividing a fixed-point value by zero."""

    KIND = "DivisionByZero"

    def __init__(self, message: str = "division by zero") -> None:
        super().__init__(message)


# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------


class InvalidParamsError(FeeMarketError):
    """Raised when parameters violate a constraint. The reason names it."""

    KIND = "InvalidParams"


class InvalidStateError(FeeMarketError):
    """Raised when the controller state violates an invariant."""

    KIND = "InvalidState"


class BlockGasOverflowError(FeeMarketError):
    """
    Raised when recording gas would exceed the maximum block utilization.

    Attributes:
        utilization: Gas the block would reach with the new transaction.
        max_utilization: The block gas cap in force.
    """

    KIND = "BlockGasOverflow"

    def __init__(self, utilization: int, max_utilization: int) -> None:
        self.utilization = utilization
        self.max_utilization = max_utilization
        super().__init__(
            f"block utilization of {utilization} cannot exceed "
            f"max block utilization of {max_utilization}"
        )


# -----------------------------------------------------------------------------
# Admission
# -----------------------------------------------------------------------------


class InvalidGasLimitError(FeeMarketError):
    """Raised for a zero gas limit, or gas usage above the limit."""

    KIND = "InvalidGasLimit"


class NoFeeCoinsError(FeeMarketError):
    """Raised when a transaction carries no fee coin at all."""

    KIND = "NoFeeCoins"

    def __init__(self) -> None:
        super().__init__("no fee coin provided, exactly one must be provided")


class TooManyFeeCoinsError(FeeMarketError):
    """
    Raised when a transaction pays its fee in more than one denomination.

    Attributes:
        count: Number of fee coins provided.
    """

    KIND = "TooManyFeeCoins"

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"too many fee coins provided ({count}), only one may be provided")


class InsufficientFeeError(FeeMarketError):
    """
    Raised when the declared fee is below the required amount.

    Attributes:
        required: The minimum fee for the transaction's gas limit.
        got: The fee the transaction declared.
    """

    KIND = "InsufficientFee"

    def __init__(self, required: Coin, got: Coin) -> None:
        self.required = required
        self.got = got
        super().__init__(f"insufficient fees; got: {got} required: {required}")


class UnknownDenomError(FeeMarketError):
    """Raised when a price cannot be expressed in the requested denomination."""

    KIND = "UnknownDenom"


# -----------------------------------------------------------------------------
# Settlement
# -----------------------------------------------------------------------------


class InsufficientFundsError(FeeMarketError):
    """Raised when the fee payer cannot cover the charged fee."""

    KIND = "InsufficientFunds"


class FeeGrantDeniedError(FeeMarketError):
    """Raised when a fee granter refuses to pay for the grantee."""

    KIND = "FeeGrantDenied"


class UnknownAddressError(FeeMarketError):
    """Raised when the account to charge does not exist."""

    KIND = "UnknownAddress"


class ModuleAccountNotSetError(FeeMarketError):
    """Raised when the fee collector module account is unknown to the host."""

    KIND = "ModuleAccountNotSet"


class RefundFailedError(FeeMarketError):
    """Raised when post-execution settlement transfers fail."""

    KIND = "RefundFailed"


class SettlementError(FeeMarketError):
    """Raised when settlement steps are invoked out of order."""

    KIND = "Settlement"


# -----------------------------------------------------------------------------
# Authority and host ports
# -----------------------------------------------------------------------------


class UnauthorizedError(FeeMarketError):
    """
    Raised when a parameter update is signed by someone other than the authority.

    Attributes:
        authority: The configured authority.
        signer: The address that attempted the update.
    """

    KIND = "Unauthorized"

    def __init__(self, authority: str, signer: str) -> None:
        self.authority = authority
        self.signer = signer
        super().__init__(f"invalid authority; expected {authority}, got {signer}")


class PortError(FeeMarketError):
    """Raised by host port implementations when an operation fails."""

    KIND = "Port"
