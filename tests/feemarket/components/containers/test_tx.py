"""Tests for the transaction view."""

from feemarket.components.containers import Tx
from feemarket.types import Coin, Uint64
from tests.feemarket.helpers import PAYER, make_address, make_tx


def test_fee_payer_defaults_to_payer() -> None:
    tx = make_tx(100, 10)
    assert tx.fee_payer == PAYER
    assert tx.fee_coin() == Coin(denom="stake", amount=100)


def test_fee_payer_is_granter_when_set() -> None:
    granter = make_address(9)
    assert make_tx(100, 10, fee_granter=granter).fee_payer == granter


def test_fee_coin_requires_single_coin() -> None:
    tx = Tx(fee=(), gas_limit=Uint64(1), payer=PAYER)
    assert tx.fee_coin() is None


def test_hash_identifies_content() -> None:
    assert make_tx(100, 10).hash == make_tx(100, 10).hash
    assert make_tx(100, 10).hash != make_tx(101, 10).hash
    assert len(make_tx(100, 10).hash) == 64


def test_lists_accepted() -> None:
    tx = Tx.model_validate(
        {
            "fee": [Coin(denom="stake", amount=1)],
            "gasLimit": 5,
            "payer": PAYER,
            "msgs": ["/cosmos.bank.v1beta1.MsgSend"],
        }
    )
    assert tx.fee == (Coin(denom="stake", amount=1),)
    assert tx.msgs == ("/cosmos.bank.v1beta1.MsgSend",)
