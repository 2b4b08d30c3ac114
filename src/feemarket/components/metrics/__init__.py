"""
Metrics module for observability.

Provides counters, gauges, and histograms for tracking the fee market.
Exposes metrics in Prometheus text format.
"""

from .registry import (
    REGISTRY,
    average_utilization,
    base_fee,
    end_block_time,
    fee_checks,
    fee_deductions,
    fee_refunds,
    fee_rejections,
    generate_metrics,
    learning_rate,
    market_updates,
    net_utilization,
)

__all__ = [
    "REGISTRY",
    "average_utilization",
    "base_fee",
    "end_block_time",
    "fee_checks",
    "fee_deductions",
    "fee_refunds",
    "fee_rejections",
    "generate_metrics",
    "learning_rate",
    "market_updates",
    "net_utilization",
]
