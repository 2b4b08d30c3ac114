"""Coin types: integer amounts and decimal prices tagged with a denomination."""

from __future__ import annotations

from pydantic import Field

from .base import StrictBaseModel
from .dec import Dec


class Coin(StrictBaseModel):
    """An integer amount of a single denomination."""

    denom: str = Field(min_length=1)
    """Denomination tag, e.g. `stake`."""

    amount: int = Field(ge=0)
    """Amount in the smallest unit of the denomination."""

    @classmethod
    def zero(cls, denom: str) -> Coin:
        """A zero amount of `denom`."""
        return cls(denom=denom, amount=0)

    def is_zero(self) -> bool:
        return self.amount == 0

    def _check_denom(self, other: Coin) -> None:
        if other.denom != self.denom:
            raise ValueError(f"denomination mismatch: {self.denom} and {other.denom}")

    def add(self, other: Coin) -> Coin:
        """Sum of two amounts of the same denomination."""
        self._check_denom(other)
        return Coin(denom=self.denom, amount=self.amount + other.amount)

    def sub(self, other: Coin) -> Coin:
        """
        Difference of two amounts of the same denomination.

        Raises:
            ValueError: If the result would be negative.
        """
        self._check_denom(other)
        if other.amount > self.amount:
            raise ValueError(f"negative coin amount: {self} - {other}")
        return Coin(denom=self.denom, amount=self.amount - other.amount)

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


class DecCoin(StrictBaseModel):
    """A decimal amount of a single denomination, typically a per-gas price."""

    denom: str = Field(min_length=1)
    """Denomination tag."""

    amount: Dec
    """Decimal amount."""

    @classmethod
    def from_coin(cls, coin: Coin) -> DecCoin:
        return cls(denom=coin.denom, amount=Dec(coin.amount))

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"


Coins = tuple[Coin, ...]
"""A fee as declared by a transaction: zero or more coins."""


def coins_to_str(coins: Coins) -> str:
    """Render coins the way they appear in event attributes: `100stake,5atom`."""
    return ",".join(str(coin) for coin in coins)
