"""
Fee Settlement.

Moves fees between the payer and the fee collector module account.
Every transaction walks the same sequence of phases:

::

    NEW --admit--> ADMITTED --deduct--> CHARGED --record gas--> POST_CHARGED --refund--> DONE

A payout that fails partway moves the settlement to FAILED, from which no
step can be retried.

Before execution the full offered fee (required part plus tip) is escrowed
in the fee collector. After execution the unused part of the requirement
is refunded, and the tip is either refunded (failed execution) or handed
to the block proposer (successful execution with fee distribution on).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from feemarket.components.admission import FeeCheck, fee_for_gas
from feemarket.components.containers import EventManager, Params, Tx
from feemarket.components.containers.event import (
    ATTRIBUTE_KEY_PAYEE,
    ATTRIBUTE_KEY_PAYER,
    ATTRIBUTE_KEY_REFUND,
    ATTRIBUTE_KEY_REQUIRED,
    ATTRIBUTE_KEY_TIP,
    EVENT_TYPE_TX_FEE,
    EVENT_TYPE_TX_REFUND,
    Event,
)
from feemarket.components.ports import AccountPort, BankPort, FeeGrantPort
from feemarket.types import (
    Coin,
    DecCoin,
    FeeGrantDeniedError,
    InsufficientFundsError,
    InvalidGasLimitError,
    ModuleAccountNotSetError,
    PortError,
    RefundFailedError,
    SettlementError,
    Uint64,
    UnknownAddressError,
)

logger = logging.getLogger(__name__)


class SettlementPhase(Enum):
    """Position of a transaction in the settlement sequence."""

    NEW = auto()
    ADMITTED = auto()
    CHARGED = auto()
    POST_CHARGED = auto()
    DONE = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class Charge:
    """What was taken from the payer before execution."""

    payer: str
    """Account actually charged: the fee granter when one paid."""

    required: Coin
    """Escrowed requirement."""

    tip: Coin
    """Escrowed tip."""

    gas_price: DecCoin | None
    """Per-gas price used to price actual usage. None when the floor was bypassed."""

    @property
    def total(self) -> Coin:
        """Everything escrowed in the fee collector."""
        return self.required.add(self.tip)


@dataclass(slots=True)
class FeeSettlement:
    """
    Settlement progress of one transaction.

    Each step checks that it follows the previous one, so a host calling
    the steps out of order fails loudly instead of double charging.
    """

    tx: Tx
    phase: SettlementPhase = SettlementPhase.NEW
    check: FeeCheck | None = None
    charge: Charge | None = None
    refund: Coin | None = None

    def expect(self, phase: SettlementPhase) -> None:
        """
        Check the settlement is at `phase`.

        Raises:
            SettlementError: If it is at any other phase.
        """
        if self.phase is not phase:
            raise SettlementError(
                f"settlement of {self.tx.hash} is at phase {self.phase.name}, "
                f"expected {phase.name}"
            )

    def _advance(self, expected: SettlementPhase, target: SettlementPhase) -> None:
        self.expect(expected)
        self.phase = target

    def admit(self, check: FeeCheck) -> None:
        """Record a passed fee check."""
        self._advance(SettlementPhase.NEW, SettlementPhase.ADMITTED)
        self.check = check

    def charged(self, charge: Charge) -> None:
        """Record the escrowed fee."""
        self._advance(SettlementPhase.ADMITTED, SettlementPhase.CHARGED)
        self.charge = charge

    def gas_recorded(self) -> None:
        """Record that execution finished and its gas was accounted."""
        self._advance(SettlementPhase.CHARGED, SettlementPhase.POST_CHARGED)

    def finished(self, refund: Coin) -> None:
        """Record the refund paid back to the payer."""
        self._advance(SettlementPhase.POST_CHARGED, SettlementPhase.DONE)
        self.refund = refund

    def failed(self) -> None:
        """
        Close a settlement whose payout broke off partway.

        Coins may already have left the fee collector, so no step can run
        again for this transaction.
        """
        if self.phase in (SettlementPhase.DONE, SettlementPhase.FAILED):
            raise SettlementError(
                f"settlement of {self.tx.hash} is already closed at phase {self.phase.name}"
            )
        self.phase = SettlementPhase.FAILED


def _module_address(accounts: AccountPort, name: str) -> str:
    address = accounts.get_module_address(name)
    if address is None:
        raise ModuleAccountNotSetError(f"module account ({name}) has not been set")
    return address


def deduct_fees(
    tx: Tx,
    required: Coin,
    tip: Coin,
    gas_price: DecCoin | None,
    *,
    accounts: AccountPort,
    bank: BankPort,
    fee_grant: FeeGrantPort | None,
    events: EventManager,
    fee_collector_name: str,
) -> Charge:
    """
    Escrow `required + tip` from the fee payer into the fee collector.

    Raises:
        ModuleAccountNotSetError: If the fee collector account is unknown.
        FeeGrantDeniedError: If the granter does not cover the payer.
        UnknownAddressError: If the charged account does not exist.
        InsufficientFundsError: If the coins cannot be transferred.
    """
    _module_address(accounts, fee_collector_name)

    total = required.add(tip)
    charged_address = tx.payer

    # A granter other than the payer must approve the whole amount first.
    if tx.fee_granter is not None:
        if tx.fee_granter != tx.payer:
            if fee_grant is None:
                raise FeeGrantDeniedError("fee grants are not enabled")
            try:
                fee_grant.use_granted_fees(tx.fee_granter, tx.payer, (total,), tx.msgs)
            except PortError as e:
                raise FeeGrantDeniedError(
                    f"{tx.fee_granter} does not allow to pay fees for {tx.payer}: {e.message}"
                ) from e
        charged_address = tx.fee_granter

    if accounts.get_account(charged_address) is None:
        raise UnknownAddressError(f"fee payer address: {charged_address} does not exist")

    if not total.is_zero():
        if not bank.is_send_enabled((total,)):
            raise InsufficientFundsError(f"sending {total.denom} is disabled")
        try:
            bank.send_from_account_to_module(charged_address, fee_collector_name, (total,))
        except PortError as e:
            raise InsufficientFundsError(
                f"{charged_address} cannot pay {total}: {e.message}"
            ) from e

    events.emit(
        Event.new(
            EVENT_TYPE_TX_FEE,
            **{
                ATTRIBUTE_KEY_PAYER: charged_address,
                ATTRIBUTE_KEY_REQUIRED: required,
                ATTRIBUTE_KEY_TIP: tip,
            },
        )
    )
    logger.debug("Charged %s: required %s, tip %s", charged_address, required, tip)

    return Charge(payer=charged_address, required=required, tip=tip, gas_price=gas_price)


def used_fee(charge: Charge, gas_used: Uint64) -> Coin:
    """
    Fee actually consumed by `gas_used`, never more than the requirement.

    A bypassed floor has no price, so the whole requirement is consumed.
    """
    if charge.gas_price is None:
        return charge.required
    amount = fee_for_gas(charge.gas_price, gas_used).amount
    return Coin(denom=charge.required.denom, amount=min(amount, charge.required.amount))


def refund_fees(
    charge: Charge,
    gas_limit: Uint64,
    gas_used: Uint64,
    success: bool,
    params: Params,
    *,
    accounts: AccountPort,
    bank: BankPort,
    events: EventManager,
    fee_collector_name: str,
    distribution_module_name: str,
    proposer: str | None = None,
) -> Coin:
    """
    Settle an executed transaction out of the fee collector.

    Returns:
        The coin refunded to the charged account, possibly zero.

    Raises:
        InvalidGasLimitError: If more gas was used than the limit allows.
        ModuleAccountNotSetError: If a module account is unknown.
        RefundFailedError: If a transfer out of the fee collector fails.
    """
    if gas_used > gas_limit:
        raise InvalidGasLimitError(f"gas used {gas_used} exceeds gas limit {gas_limit}")

    collector = _module_address(accounts, fee_collector_name)

    refund = charge.required.sub(used_fee(charge, gas_used))
    tip_recipient: str | None = None
    if not success:
        refund = refund.add(charge.tip)
    elif params.distribute_fees and not charge.tip.is_zero():
        tip_recipient = proposer or _module_address(accounts, distribution_module_name)

    # The payer is made whole before anyone else is paid.
    if not refund.is_zero():
        try:
            bank.send(collector, charge.payer, (refund,))
        except PortError as e:
            raise RefundFailedError(
                f"failed to refund {refund} to {charge.payer}: {e.message}"
            ) from e
        events.emit(
            Event.new(
                EVENT_TYPE_TX_REFUND,
                **{ATTRIBUTE_KEY_PAYEE: charge.payer, ATTRIBUTE_KEY_REFUND: refund},
            )
        )
        logger.debug("Refunded %s to %s", refund, charge.payer)

    if tip_recipient is not None:
        try:
            bank.send(collector, tip_recipient, (charge.tip,))
        except PortError as e:
            raise RefundFailedError(f"failed to distribute tip {charge.tip}: {e.message}") from e
        logger.debug("Distributed tip %s to %s", charge.tip, tip_recipient)

    return refund
