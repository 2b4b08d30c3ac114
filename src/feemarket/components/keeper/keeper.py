"""
Fee market keeper.

The keeper is the single writer of the fee market's params and state. The
host drives it from three places:

- Genesis: `init_genesis` / `export_genesis`, or `bootstrap` on restart.
- Blocks: `begin_block` before the first transaction, `end_block` after
  the last one.
- Transactions: `check_fee`, then `deduct` before execution, then
  `refund` after execution.

Authority messages reach it through `update_params`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from feemarket.config import HostConfig
from feemarket.components.admission import FeeCheck, check_tx_fee, resolve_gas_price
from feemarket.components.containers import EventManager, Params, State, Tx
from feemarket.components.containers.event import (
    ATTRIBUTE_KEY_BASE_FEE,
    ATTRIBUTE_KEY_HEIGHT,
    ATTRIBUTE_KEY_LEARNING_RATE,
    EVENT_TYPE_FEE_MARKET_UPDATE,
    Event,
)
from feemarket.components.genesis import GenesisState
from feemarket.components.metrics import registry as metrics
from feemarket.components.ports import (
    AccountPort,
    BankPort,
    ConsensusPort,
    DenomResolver,
    FeeGrantPort,
)
from feemarket.components.settlement import (
    Charge,
    FeeSettlement,
    SettlementPhase,
    deduct_fees,
    refund_fees,
)
from feemarket.components.storage import Database
from feemarket.types import (
    Coin,
    DecCoin,
    FeeMarketError,
    InvalidParamsError,
    InvalidStateError,
    RefundFailedError,
    SettlementError,
    UnauthorizedError,
    Uint64,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FeeMarketKeeper:
    """
    Owns the fee market's storage and wires it to the host ports.

    Params and state are immutable snapshots. Every mutation builds a new
    snapshot and stores it, so readers always see a consistent pair.
    """

    database: Database
    """Storage for the params and state slots."""

    accounts: AccountPort
    """Account lookups."""

    bank: BankPort
    """Coin transfers."""

    fee_grant: FeeGrantPort | None = None
    """Fee allowances. Without it, granted fees are refused."""

    resolver: DenomResolver | None = None
    """Price conversion. Without it, only the fee denomination is accepted."""

    consensus: ConsensusPort | None = None
    """Block gas limit used to bound parameter updates."""

    config: HostConfig = field(default_factory=HostConfig)
    """Process-wide settings handed over by the host."""

    events: EventManager = field(default_factory=EventManager)
    """Events emitted by the module."""

    _height: int = field(default=1, repr=False)
    """Height announced by the last `begin_block`. Genesis is height 0."""

    _proposer: str | None = field(default=None, repr=False)
    """Proposer of the current block, receiving distributed tips."""

    _settlements: dict[str, FeeSettlement] = field(default_factory=dict, repr=False)
    """Settlement progress of the current block's transactions, by tx hash."""

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def params(self) -> Params:
        """
        The parameters in force.

        Raises:
            InvalidStateError: If genesis has not been applied.
        """
        params = self.database.get_params()
        if params is None:
            raise InvalidStateError("fee market params have not been initialized")
        return params

    def state(self) -> State:
        """
        The current controller state.

        Raises:
            InvalidStateError: If genesis has not been applied.
        """
        state = self.database.get_state()
        if state is None:
            raise InvalidStateError("fee market state has not been initialized")
        return state

    def base_gas_price(self) -> DecCoin:
        """The base fee in the fee denomination."""
        params = self.params()
        return DecCoin(denom=params.fee_denom, amount=self.state().base_fee)

    def gas_price(self, denom: str) -> DecCoin:
        """
        The base fee expressed in `denom`.

        Raises:
            UnknownDenomError: If `denom` cannot be priced.
        """
        return resolve_gas_price(self.params(), self.state(), denom, self.resolver)

    def settlement(self, tx: Tx) -> FeeSettlement | None:
        """Settlement progress of `tx` in the current block, if any."""
        return self._settlements.get(tx.hash)

    # -------------------------------------------------------------------------
    # Genesis
    # -------------------------------------------------------------------------

    def init_genesis(self, genesis: GenesisState) -> None:
        """
        Validate and store the genesis params and state.

        Raises:
            InvalidParamsError: If the parameters are inconsistent.
            InvalidStateError: If the state does not fit the parameters.
        """
        genesis.validate()

        with self.database.transaction():
            self.database.put_params(genesis.params)
            self.database.put_state(genesis.state)

        self._observe(genesis.state)
        logger.info(
            "Initialized fee market genesis: base_fee=%s learning_rate=%s window=%d",
            genesis.state.base_fee,
            genesis.state.learning_rate,
            len(genesis.state.window),
        )

    def export_genesis(self) -> GenesisState:
        """Current params and state, ready to seed a new chain."""
        return GenesisState(params=self.params(), state=self.state())

    def bootstrap(self) -> None:
        """
        Load stored params and state, or apply the default genesis.

        A missing slot means the store was never initialized, so both
        slots are rewritten from the default genesis.
        """
        params = self.database.get_params()
        state = self.database.get_state()
        if params is None or state is None:
            logger.info("No stored fee market found, applying default genesis")
            self.init_genesis(GenesisState.default(self.config.fee_denom))
            return

        state.validate(params)
        self._observe(state)

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def begin_block(self, height: int, proposer: str | None = None) -> None:
        """
        Announce the block about to be executed. Does not touch state.

        Events of the previous block are discarded, so the host must read
        `events` after `end_block` and before the next `begin_block`.
        """
        unfinished = [s for s in self._settlements.values() if s.refund is None]
        if unfinished:
            logger.debug(
                "Dropping %d unfinished settlements at height %d", len(unfinished), height
            )
        self._settlements.clear()
        self.events.drain()
        self._height = height
        self._proposer = proposer

    def end_block(self, height: int) -> State:
        """
        Fold the finished block into the controller.

        Runs the learning rate update, the base fee update and the window
        advance as one storage transaction, then reports the new prices.

        Returns:
            The state in force for the next block.
        """
        params = self.params()
        if not params.enabled:
            logger.warning("Fee market disabled, skipping update at height %d", height)
            return self.state()

        with metrics.end_block_time.time():
            with self.database.transaction():
                state = self.state().process_block(params)
                self.database.put_state(state)

        self.events.emit(
            Event.new(
                EVENT_TYPE_FEE_MARKET_UPDATE,
                **{
                    ATTRIBUTE_KEY_BASE_FEE: state.base_fee,
                    ATTRIBUTE_KEY_LEARNING_RATE: state.learning_rate,
                    ATTRIBUTE_KEY_HEIGHT: height,
                },
            )
        )
        metrics.market_updates.inc()
        self._observe(state)

        logger.info(
            "Fee market update at height %d: base_fee=%s learning_rate=%s",
            height,
            state.base_fee,
            state.learning_rate,
        )
        return state

    # -------------------------------------------------------------------------
    # Parameter updates
    # -------------------------------------------------------------------------

    def update_params(self, authority: str, new_params: Params) -> None:
        """
        Replace the parameters and reset the state to their floors.

        Raises:
            UnauthorizedError: If `authority` is not the configured authority.
            InvalidParamsError: If the parameters are inconsistent, or the
                block cap exceeds the consensus gas limit.
        """
        expected = self.config.authority
        if expected is None or authority != expected:
            raise UnauthorizedError(authority=expected or "<unset>", signer=authority)

        new_params.validate()

        if self.consensus is not None:
            max_gas = self.consensus.max_gas_per_block()
            if max_gas > 0 and int(new_params.max_block_utilization) > max_gas:
                raise InvalidParamsError(
                    f"max block utilization of {new_params.max_block_utilization} exceeds "
                    f"consensus max gas per block of {max_gas}"
                )

        state = State.generate_genesis(new_params)
        with self.database.transaction():
            self.database.put_params(new_params)
            self.database.put_state(state)

        self._observe(state)
        logger.info(
            "Fee market params updated by %s: window=%d min_base_fee=%s enabled=%s",
            authority,
            new_params.window,
            new_params.min_base_fee,
            new_params.enabled,
        )

    set_params = update_params

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def check_fee(self, tx: Tx, simulate: bool = False) -> FeeCheck:
        """
        Admit `tx` against the current base fee and open its settlement.

        Raises:
            FeeMarketError: The admission error explaining the rejection.
        """
        metrics.fee_checks.inc()
        try:
            check = check_tx_fee(
                tx.fee,
                tx.gas_limit,
                self.state(),
                self.params(),
                self.resolver,
                simulate=simulate,
                height=self._height,
            )
        except FeeMarketError as e:
            metrics.fee_rejections.labels(kind=e.kind).inc()
            raise

        settlement = FeeSettlement(tx=tx)
        settlement.admit(check)
        self._settlements[tx.hash] = settlement
        return check

    def _open_settlement(self, tx: Tx) -> FeeSettlement:
        settlement = self._settlements.get(tx.hash)
        if settlement is None:
            raise SettlementError(f"transaction {tx.hash} was not admitted in this block")
        return settlement

    def deduct(self, tx: Tx, required: Coin, tip: Coin) -> Charge:
        """
        Escrow the admitted fee of `tx` before execution.

        Raises:
            SettlementError: If `tx` was not admitted, is already charged, or
                `required` and `tip` differ from its fee check.
            FeeMarketError: The settlement error explaining the rejection.
        """
        settlement = self._open_settlement(tx)
        settlement.expect(SettlementPhase.ADMITTED)
        assert settlement.check is not None
        if required != settlement.check.required or tip != settlement.check.tip:
            metrics.fee_rejections.labels(kind=SettlementError.KIND).inc()
            raise SettlementError(
                f"deduction of {required} + {tip} for {tx.hash} does not match its fee "
                f"check of {settlement.check.required} + {settlement.check.tip}"
            )

        try:
            charge = deduct_fees(
                tx,
                required,
                tip,
                settlement.check.gas_price,
                accounts=self.accounts,
                bank=self.bank,
                fee_grant=self.fee_grant,
                events=self.events,
                fee_collector_name=self.config.fee_collector_name,
            )
        except FeeMarketError as e:
            metrics.fee_rejections.labels(kind=e.kind).inc()
            raise

        settlement.charged(charge)
        metrics.fee_deductions.inc()
        return charge

    def refund(self, tx: Tx, gas_used: Uint64, success: bool) -> Coin:
        """
        Account the gas of an executed `tx` and settle its fee.

        Gas is recorded before any coin moves, so a block overflow rejects
        the transaction without transfers. Both happen in one storage
        transaction.

        Returns:
            The coin refunded to the charged account.

        Raises:
            SettlementError: If `tx` was not charged.
            BlockGasOverflowError: If the block would exceed its gas cap.
            RefundFailedError: If a transfer out of the fee collector fails.
                The settlement is closed and cannot be retried.
        """
        settlement = self._open_settlement(tx)
        settlement.expect(SettlementPhase.CHARGED)
        assert settlement.charge is not None

        params = self.params()
        with self.database.transaction():
            if params.enabled:
                self.database.put_state(self.state().record_gas(gas_used))

            try:
                refund = refund_fees(
                    settlement.charge,
                    tx.gas_limit,
                    gas_used,
                    success,
                    params,
                    accounts=self.accounts,
                    bank=self.bank,
                    events=self.events,
                    fee_collector_name=self.config.fee_collector_name,
                    distribution_module_name=self.config.distribution_module_name,
                    proposer=self._proposer,
                )
            except RefundFailedError:
                settlement.failed()
                raise

        settlement.gas_recorded()
        settlement.finished(refund)
        if not refund.is_zero():
            metrics.fee_refunds.inc()
        return refund

    # -------------------------------------------------------------------------
    # Metrics
    # -------------------------------------------------------------------------

    def _observe(self, state: State) -> None:
        """Export the controller state to the metrics registry."""
        metrics.base_fee.set(float(state.base_fee))
        metrics.learning_rate.set(float(state.learning_rate))
        metrics.average_utilization.set(float(state.average_utilization()))
        metrics.net_utilization.set(state.net_utilization())
