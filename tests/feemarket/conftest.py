"""
Shared pytest fixtures for all fee market tests.

Provides parameters, in-memory host ports and a wired keeper.
Import these fixtures automatically via pytest discovery.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from feemarket.config import HostConfig
from feemarket.components.chain.config import DISTRIBUTION_MODULE_NAME, FEE_COLLECTOR_NAME
from feemarket.components.containers import Params, default_aimd_params, default_params
from feemarket.components.genesis import GenesisState
from feemarket.components.keeper import FeeMarketKeeper
from feemarket.components.storage import SQLiteDatabase
from feemarket.types import Dec
from tests.feemarket.helpers import (
    AUTHORITY,
    DENOM,
    DISTRIBUTION_ADDRESS,
    FEE_COLLECTOR_ADDRESS,
    PAYER,
    MockAccounts,
    MockBank,
    MockConsensus,
    MockDenomResolver,
    MockFeeGrant,
)


@pytest.fixture
def params() -> Params:
    """Classic EIP-1559 parameters."""
    return default_params()


@pytest.fixture
def aimd_params() -> Params:
    """AIMD EIP-1559 parameters."""
    return default_aimd_params()


@pytest.fixture
def accounts() -> MockAccounts:
    """Account registry with the fee collector, the distribution module and a funded payer."""
    registry = MockAccounts()
    registry.add_module(FEE_COLLECTOR_NAME, FEE_COLLECTOR_ADDRESS)
    registry.add_module(DISTRIBUTION_MODULE_NAME, DISTRIBUTION_ADDRESS)
    registry.new_account(PAYER)
    return registry


@pytest.fixture
def bank(accounts: MockAccounts) -> MockBank:
    """Bank with a generously funded payer."""
    ledger = MockBank(accounts=accounts)
    ledger.fund(PAYER, DENOM, 10**24)
    return ledger


@pytest.fixture
def fee_grant() -> MockFeeGrant:
    """Fee allowance registry without any grant."""
    return MockFeeGrant()


@pytest.fixture
def resolver() -> MockDenomResolver:
    """Resolver pricing `atom` at half the fee denomination."""
    return MockDenomResolver(rates={"atom": Dec("0.5")})


@pytest.fixture
def consensus() -> MockConsensus:
    """Consensus with a 100M gas block limit."""
    return MockConsensus(max_gas=100_000_000)


@pytest.fixture
def database() -> Iterator[SQLiteDatabase]:
    """In-memory SQLite database."""
    with SQLiteDatabase(":memory:") as db:
        yield db


@pytest.fixture
def host_config() -> HostConfig:
    """Host configuration with a parameter-update authority."""
    return HostConfig(authority=AUTHORITY)


@pytest.fixture
def keeper(
    database: SQLiteDatabase,
    accounts: MockAccounts,
    bank: MockBank,
    fee_grant: MockFeeGrant,
    resolver: MockDenomResolver,
    consensus: MockConsensus,
    host_config: HostConfig,
) -> FeeMarketKeeper:
    """Keeper initialized with the default genesis, inside block 1."""
    fee_market = FeeMarketKeeper(
        database=database,
        accounts=accounts,
        bank=bank,
        fee_grant=fee_grant,
        resolver=resolver,
        consensus=consensus,
        config=host_config,
    )
    fee_market.init_genesis(GenesisState.default())
    fee_market.begin_block(1)
    return fee_market
