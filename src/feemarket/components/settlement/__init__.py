"""Fee settlement: escrow before execution, refund and tip handling after."""

from .settlement import (
    Charge,
    FeeSettlement,
    SettlementPhase,
    deduct_fees,
    refund_fees,
    used_fee,
)

__all__ = [
    "Charge",
    "FeeSettlement",
    "SettlementPhase",
    "deduct_fees",
    "refund_fees",
    "used_fee",
]
