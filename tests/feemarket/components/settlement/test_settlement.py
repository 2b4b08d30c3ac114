"""Tests for fee settlement."""

import pytest

from feemarket.components.admission import FeeCheck, fee_for_gas
from feemarket.components.chain.config import DISTRIBUTION_MODULE_NAME, FEE_COLLECTOR_NAME
from feemarket.components.containers import EventManager, Params
from feemarket.components.containers.event import EVENT_TYPE_TX_FEE, EVENT_TYPE_TX_REFUND
from feemarket.components.settlement import (
    Charge,
    FeeSettlement,
    SettlementPhase,
    deduct_fees,
    refund_fees,
    used_fee,
)
from feemarket.types import (
    Coin,
    Dec,
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
from tests.feemarket.helpers import (
    DENOM,
    DISTRIBUTION_ADDRESS,
    FEE_COLLECTOR_ADDRESS,
    PAYER,
    MockAccounts,
    MockBank,
    MockFeeGrant,
    make_address,
    make_tx,
)

GAS_PRICE = DecCoin(denom=DENOM, amount=Dec(100))
PROPOSER = make_address(50)


def stake(amount: int) -> Coin:
    return Coin(denom=DENOM, amount=amount)


@pytest.fixture
def events() -> EventManager:
    return EventManager()


def deduct(
    accounts: MockAccounts,
    bank: MockBank,
    events: EventManager,
    *,
    required: int = 200_000,
    tip: int = 50_000,
    fee_grant: MockFeeGrant | None = None,
    fee_granter: str | None = None,
    gas_price: DecCoin | None = GAS_PRICE,
) -> Charge:
    tx = make_tx(required + tip, 2000, fee_granter=fee_granter)
    return deduct_fees(
        tx,
        stake(required),
        stake(tip),
        gas_price,
        accounts=accounts,
        bank=bank,
        fee_grant=fee_grant,
        events=events,
        fee_collector_name=FEE_COLLECTOR_NAME,
    )


def refund(
    charge: Charge,
    params: Params,
    accounts: MockAccounts,
    bank: MockBank,
    events: EventManager,
    *,
    gas_used: int,
    success: bool = True,
    proposer: str | None = None,
) -> Coin:
    return refund_fees(
        charge,
        Uint64(2000),
        Uint64(gas_used),
        success,
        params,
        accounts=accounts,
        bank=bank,
        events=events,
        fee_collector_name=FEE_COLLECTOR_NAME,
        distribution_module_name=DISTRIBUTION_MODULE_NAME,
        proposer=proposer,
    )


class TestDeductFees:
    """Escrow before execution."""

    def test_escrows_required_and_tip(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        before = bank.balance(PAYER, DENOM)
        charge = deduct(accounts, bank, events)

        assert charge == Charge(
            payer=PAYER, required=stake(200_000), tip=stake(50_000), gas_price=GAS_PRICE
        )
        assert charge.total == stake(250_000)
        assert bank.balance(PAYER, DENOM) == before - 250_000
        assert bank.balance(FEE_COLLECTOR_ADDRESS, DENOM) == 250_000

        [event] = events.of_type(EVENT_TYPE_TX_FEE)
        assert event.get("payer") == PAYER
        assert event.get("required") == "200000stake"
        assert event.get("tip") == "50000stake"

    def test_fee_collector_must_exist(self, bank: MockBank, events: EventManager) -> None:
        accounts = MockAccounts(accounts={PAYER})
        with pytest.raises(ModuleAccountNotSetError, match=FEE_COLLECTOR_NAME):
            deduct(accounts, bank, events)

    def test_unknown_payer(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        accounts.accounts.discard(PAYER)
        with pytest.raises(UnknownAddressError, match=PAYER):
            deduct(accounts, bank, events)
        assert bank.transfers == []

    def test_insufficient_balance(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        bank.balances[PAYER][DENOM] = 100
        with pytest.raises(InsufficientFundsError) as exc_info:
            deduct(accounts, bank, events)
        assert isinstance(exc_info.value.__cause__, PortError)
        assert events.events == ()

    def test_send_disabled(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        bank.disabled_denoms.add(DENOM)
        with pytest.raises(InsufficientFundsError, match="disabled"):
            deduct(accounts, bank, events)

    def test_zero_fee_moves_nothing(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        deduct(accounts, bank, events, required=0, tip=0)
        assert bank.transfers == []
        assert len(events.of_type(EVENT_TYPE_TX_FEE)) == 1


class TestFeeGrants:
    """Fees paid by a granter on behalf of the payer."""

    @pytest.fixture
    def granter(self, accounts: MockAccounts, bank: MockBank) -> str:
        address = make_address(7)
        accounts.new_account(address)
        bank.fund(address, DENOM, 10**9)
        return address

    def test_granter_charged(
        self,
        accounts: MockAccounts,
        bank: MockBank,
        events: EventManager,
        fee_grant: MockFeeGrant,
        granter: str,
    ) -> None:
        fee_grant.grant(granter, PAYER, 1_000_000)
        payer_before = bank.balance(PAYER, DENOM)

        charge = deduct(accounts, bank, events, fee_grant=fee_grant, fee_granter=granter)

        assert charge.payer == granter
        assert bank.balance(granter, DENOM) == 10**9 - 250_000
        assert bank.balance(PAYER, DENOM) == payer_before
        assert fee_grant.allowances[(granter, PAYER)] == 750_000

    def test_grant_denied(
        self,
        accounts: MockAccounts,
        bank: MockBank,
        events: EventManager,
        fee_grant: MockFeeGrant,
        granter: str,
    ) -> None:
        fee_grant.grant(granter, PAYER, 249_999)
        with pytest.raises(FeeGrantDeniedError, match="does not allow to pay fees") as exc_info:
            deduct(accounts, bank, events, fee_grant=fee_grant, fee_granter=granter)
        assert isinstance(exc_info.value.__cause__, PortError)
        assert bank.transfers == []

    def test_grants_disabled(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager, granter: str
    ) -> None:
        with pytest.raises(FeeGrantDeniedError, match="not enabled"):
            deduct(accounts, bank, events, fee_grant=None, fee_granter=granter)

    def test_self_grant_needs_no_allowance(
        self, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events, fee_grant=None, fee_granter=PAYER)
        assert charge.payer == PAYER


class TestRefundFees:
    """Settlement after execution."""

    def test_full_usage_refunds_nothing(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events, tip=0)
        assert refund(charge, params, accounts, bank, events, gas_used=2000) == stake(0)
        assert events.of_type(EVENT_TYPE_TX_REFUND) == []
        assert bank.balance(FEE_COLLECTOR_ADDRESS, DENOM) == 200_000

    def test_unused_gas_refunded(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events)
        payer_before = bank.balance(PAYER, DENOM)

        refunded = refund(charge, params, accounts, bank, events, gas_used=500)

        assert refunded == stake(150_000)
        assert bank.balance(PAYER, DENOM) == payer_before + 150_000
        # The tip stays escrowed when fees are not distributed.
        assert bank.balance(FEE_COLLECTOR_ADDRESS, DENOM) == 100_000
        [event] = events.of_type(EVENT_TYPE_TX_REFUND)
        assert event.get("payee") == PAYER
        assert event.get("refund") == "150000stake"

    def test_failure_refunds_tip(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events)
        refunded = refund(charge, params, accounts, bank, events, gas_used=2000, success=False)
        assert refunded == stake(50_000)

    def test_tip_distributed_to_proposer(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        params = params.model_copy(update={"distribute_fees": True})
        charge = deduct(accounts, bank, events)

        refunded = refund(
            charge, params, accounts, bank, events, gas_used=2000, proposer=PROPOSER
        )

        assert refunded == stake(0)
        assert bank.balance(PROPOSER, DENOM) == 50_000
        assert bank.balance(FEE_COLLECTOR_ADDRESS, DENOM) == 200_000

    def test_tip_distributed_to_module_without_proposer(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        params = params.model_copy(update={"distribute_fees": True})
        charge = deduct(accounts, bank, events)
        refund(charge, params, accounts, bank, events, gas_used=2000)
        assert bank.balance(DISTRIBUTION_ADDRESS, DENOM) == 50_000

    def test_failed_tx_tip_not_distributed(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        params = params.model_copy(update={"distribute_fees": True})
        charge = deduct(accounts, bank, events)
        refund(
            charge, params, accounts, bank, events, gas_used=2000, success=False, proposer=PROPOSER
        )
        assert bank.balance(PROPOSER, DENOM) == 0

    def test_gas_used_above_limit(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events)
        with pytest.raises(InvalidGasLimitError):
            refund(charge, params, accounts, bank, events, gas_used=2001)

    def test_transfer_failure(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events)
        bank.fail_sends = True
        with pytest.raises(RefundFailedError) as exc_info:
            refund(charge, params, accounts, bank, events, gas_used=0)
        assert isinstance(exc_info.value.__cause__, PortError)

    def test_failed_refund_leaves_tip_escrowed(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        params = params.model_copy(update={"distribute_fees": True})
        charge = deduct(accounts, bank, events)
        bank.fail_sends_to.add(PAYER)

        with pytest.raises(RefundFailedError, match="failed to refund"):
            refund(charge, params, accounts, bank, events, gas_used=500, proposer=PROPOSER)

        assert bank.balance(PROPOSER, DENOM) == 0
        assert bank.balance(FEE_COLLECTOR_ADDRESS, DENOM) == 250_000
        assert events.of_type(EVENT_TYPE_TX_REFUND) == []

    def test_refund_paid_before_tip(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        params = params.model_copy(update={"distribute_fees": True})
        charge = deduct(accounts, bank, events)
        payer_before = bank.balance(PAYER, DENOM)
        bank.fail_sends_to.add(PROPOSER)

        with pytest.raises(RefundFailedError, match="failed to distribute tip"):
            refund(charge, params, accounts, bank, events, gas_used=500, proposer=PROPOSER)

        assert bank.balance(PAYER, DENOM) == payer_before + 150_000
        assert bank.balance(PROPOSER, DENOM) == 0
        assert len(events.of_type(EVENT_TYPE_TX_REFUND)) == 1

    def test_bypassed_floor_keeps_fee(
        self, params: Params, accounts: MockAccounts, bank: MockBank, events: EventManager
    ) -> None:
        charge = deduct(accounts, bank, events, tip=0, gas_price=None)
        assert refund(charge, params, accounts, bank, events, gas_used=0) == stake(0)


class TestUsedFee:
    """Pricing of actual gas usage."""

    def test_rounds_up(self) -> None:
        charge = Charge(
            payer=PAYER,
            required=stake(1000),
            tip=stake(0),
            gas_price=DecCoin(denom=DENOM, amount=Dec("0.5")),
        )
        assert used_fee(charge, Uint64(3)) == stake(2)

    def test_capped_at_required(self) -> None:
        charge = Charge(payer=PAYER, required=stake(10), tip=stake(0), gas_price=GAS_PRICE)
        assert used_fee(charge, Uint64(1000)) == stake(10)

    def test_same_rounding_as_admission(self) -> None:
        price = DecCoin(denom=DENOM, amount=Dec("0.333333333333333333"))
        charge = Charge(payer=PAYER, required=stake(1000), tip=stake(0), gas_price=price)
        assert used_fee(charge, Uint64(7)) == fee_for_gas(price, Uint64(7)) == stake(3)


class TestFeeSettlement:
    """Phase ordering of one transaction's settlement."""

    @pytest.fixture
    def check(self) -> FeeCheck:
        return FeeCheck(required=stake(10), tip=stake(0), priority=1, gas_price=GAS_PRICE)

    @pytest.fixture
    def charge(self) -> Charge:
        return Charge(payer=PAYER, required=stake(10), tip=stake(0), gas_price=GAS_PRICE)

    def test_happy_path(self, check: FeeCheck, charge: Charge) -> None:
        settlement = FeeSettlement(tx=make_tx(10, 1))
        assert settlement.phase is SettlementPhase.NEW
        settlement.admit(check)
        settlement.charged(charge)
        settlement.gas_recorded()
        settlement.finished(stake(0))
        assert settlement.phase is SettlementPhase.DONE
        assert settlement.refund == stake(0)

    def test_charge_before_admission(self, charge: Charge) -> None:
        settlement = FeeSettlement(tx=make_tx(10, 1))
        with pytest.raises(SettlementError, match="expected ADMITTED"):
            settlement.charged(charge)

    def test_double_admission(self, check: FeeCheck) -> None:
        settlement = FeeSettlement(tx=make_tx(10, 1))
        settlement.admit(check)
        with pytest.raises(SettlementError, match="at phase ADMITTED"):
            settlement.admit(check)

    def test_refund_before_gas_recorded(self, check: FeeCheck, charge: Charge) -> None:
        settlement = FeeSettlement(tx=make_tx(10, 1))
        settlement.admit(check)
        settlement.charged(charge)
        with pytest.raises(SettlementError):
            settlement.finished(stake(0))

    def test_failed_closes_settlement(self, check: FeeCheck, charge: Charge) -> None:
        settlement = FeeSettlement(tx=make_tx(10, 1))
        settlement.admit(check)
        settlement.charged(charge)
        settlement.failed()

        assert settlement.phase is SettlementPhase.FAILED
        with pytest.raises(SettlementError, match="at phase FAILED"):
            settlement.gas_recorded()
        with pytest.raises(SettlementError, match="already closed"):
            settlement.failed()

    def test_done_cannot_fail(self, check: FeeCheck, charge: Charge) -> None:
        settlement = FeeSettlement(tx=make_tx(10, 1))
        settlement.admit(check)
        settlement.charged(charge)
        settlement.gas_recorded()
        settlement.finished(stake(0))
        with pytest.raises(SettlementError, match="already closed at phase DONE"):
            settlement.failed()
