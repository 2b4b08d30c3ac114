"""Property tests for the update engine over arbitrary gas histories."""

from hypothesis import given
from hypothesis import strategies as st

from feemarket.components.containers import (
    Params,
    State,
    default_aimd_params,
    default_params,
)
from feemarket.types import Dec, Uint64

MAX_GAS = 30_000_000
TARGET_GAS = 15_000_000

gas_histories = st.lists(st.integers(min_value=0, max_value=MAX_GAS), min_size=1, max_size=30)
"""Sequences of per-block gas bounded by the block cap."""

calibrations = st.sampled_from([default_params(), default_aimd_params()])


def without_delta(params: Params) -> Params:
    return params.model_copy(update={"delta": Dec(0)})


@given(params=calibrations, history=gas_histories)
def test_invariants_hold_after_every_block(params: Params, history: list[int]) -> None:
    """Every state reached from genesis satisfies all invariants."""
    state = State.generate_genesis(params)
    for gas in history:
        state = state.record_gas(Uint64(gas))
        state.validate(params)
        state = state.process_block(params)
        state.validate(params)
        assert len(state.window) == int(params.window)
        assert params.min_learning_rate <= state.learning_rate <= params.max_learning_rate
        assert state.base_fee >= state.min_base_fee


@given(history=gas_histories)
def test_classic_learning_rate_constant(history: list[int]) -> None:
    params = default_params()
    state = State.generate_genesis(params)
    for gas in history:
        state = state.record_gas(Uint64(gas)).process_block(params)
        assert state.learning_rate == Dec("0.125")


@given(params=calibrations, history=gas_histories)
def test_base_fee_follows_block_direction(params: Params, history: list[int]) -> None:
    """Without the delta term the fee moves in the direction of the block's excess."""
    params = without_delta(params)
    state = State.generate_genesis(params)
    for gas in history:
        before = state.base_fee
        state = state.record_gas(Uint64(gas)).process_block(params)
        if gas > TARGET_GAS:
            assert state.base_fee >= before
        elif gas < TARGET_GAS:
            assert state.base_fee <= before
        else:
            assert state.base_fee == before


@given(history=gas_histories)
def test_aimd_learning_rate_direction(history: list[int]) -> None:
    """Outside the target band the learning rate never falls, inside it never rises."""
    params = default_aimd_params()
    state = State.generate_genesis(params)
    for gas in history:
        state = state.record_gas(Uint64(gas))
        utilization = state.average_utilization()
        before = state.learning_rate
        state = state.process_block(params)
        if utilization <= params.theta or utilization >= Dec(1) - params.theta:
            assert state.learning_rate >= before
        else:
            assert state.learning_rate <= before


@given(params=calibrations, history=gas_histories)
def test_encoding_round_trip(params: Params, history: list[int]) -> None:
    state = State.generate_genesis(params)
    for gas in history:
        state = state.record_gas(Uint64(gas)).process_block(params)
    assert State.decode_bytes(state.encode_bytes()) == state
