"""Transaction view consumed by fee admission and settlement."""

from __future__ import annotations

from pydantic import field_validator

from feemarket.types import Coin, Coins, Container, Uint64


class Tx(Container):
    """
    The fee-relevant part of a transaction.

    The host decodes the full transaction; the fee market only sees the
    declared fee, the gas limit and who pays.
    """

    fee: Coins
    """Declared fee. Exactly one coin is accepted by admission."""

    gas_limit: Uint64
    """Gas the transaction may consume."""

    payer: str
    """Account paying the fee when no granter is set."""

    fee_granter: str | None = None
    """Account that granted the payer a fee allowance."""

    msgs: tuple[str, ...] = ()
    """Type URLs of the contained messages, checked by fee allowances."""

    @field_validator("fee", "msgs", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: object) -> object:
        if isinstance(value, list):
            return tuple(value)
        return value

    @property
    def fee_payer(self) -> str:
        """The account actually charged: the granter when one is set."""
        return self.fee_granter or self.payer

    @property
    def hash(self) -> str:
        """Hex identifier of the transaction, stable across encodings."""
        return self.hash_root().hex()

    def fee_coin(self) -> Coin | None:
        """The single fee coin, if exactly one was declared."""
        return self.fee[0] if len(self.fee) == 1 else None
