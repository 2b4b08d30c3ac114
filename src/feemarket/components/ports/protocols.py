"""
Host Ports.

The fee market never reaches into other modules. Everything it needs from
the host is expressed as a small structural interface injected into the
keeper at construction.

::

    FeeMarketKeeper
           |
           +-- AccountPort     --> module and user accounts
           +-- BankPort        --> coin transfers
           +-- FeeGrantPort    --> fee allowances (optional)
           +-- DenomResolver   --> price conversion (optional)
           +-- ConsensusPort   --> block gas limit (optional)

Implementations signal failures by raising `PortError`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from feemarket.types import Coins, DecCoin


@runtime_checkable
class AccountPort(Protocol):
    """Read access to accounts."""

    def get_module_address(self, name: str) -> str | None:
        """Address of the module account `name`, or None if unknown."""
        ...

    def get_account(self, address: str) -> object | None:
        """The account stored at `address`, or None if it does not exist."""
        ...

    def new_account(self, address: str) -> object:
        """Create an account at `address`."""
        ...


@runtime_checkable
class BankPort(Protocol):
    """Coin transfers between accounts and module accounts."""

    def send(self, from_address: str, to_address: str, coins: Coins) -> None:
        """
        Transfer `coins` between two addresses.

        Raises:
            PortError: If the sender cannot cover the amount.
        """
        ...

    def send_from_account_to_module(self, address: str, module: str, coins: Coins) -> None:
        """
        Transfer `coins` from an account to the module account `module`.

        Raises:
            PortError: If the account cannot cover the amount.
        """
        ...

    def is_send_enabled(self, coins: Coins) -> bool:
        """Whether every denomination in `coins` may currently be transferred."""
        ...


@runtime_checkable
class FeeGrantPort(Protocol):
    """Fee allowances granted by one account to another."""

    def use_granted_fees(
        self, granter: str, grantee: str, fee: Coins, msgs: tuple[str, ...]
    ) -> None:
        """
        Spend `fee` from the allowance `granter` gave to `grantee`.

        Raises:
            PortError: If no allowance covers the fee or the messages.
        """
        ...


@runtime_checkable
class DenomResolver(Protocol):
    """Conversion of prices between denominations."""

    def convert(self, coin: DecCoin, denom: str) -> DecCoin:
        """
        Express `coin` in `denom`.

        Raises:
            UnknownDenomError: If no conversion rate to `denom` is known.
        """
        ...


@runtime_checkable
class ConsensusPort(Protocol):
    """Consensus parameters of the host chain."""

    def max_gas_per_block(self) -> int:
        """The block gas limit, or -1 when blocks are unbounded."""
        ...
