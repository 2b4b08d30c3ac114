"""Fee admission: required fee, tip split and mempool priority."""

from .fee import (
    FeeCheck,
    check_tx_fee,
    fee_for_gas,
    get_tx_priority,
    required_fee,
    resolve_gas_price,
)

__all__ = [
    "FeeCheck",
    "check_tx_fee",
    "fee_for_gas",
    "get_tx_priority",
    "required_fee",
    "resolve_gas_price",
]
