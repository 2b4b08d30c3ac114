"""
Metric registry using prometheus_client.

Provides pre-defined metrics for the fee market.
Exposes metrics in Prometheus text format.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

# Dedicated registry, free of default Python process metrics.
REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Controller State
# -----------------------------------------------------------------------------

base_fee = Gauge(
    "feemarket_base_fee",
    "Current base fee per unit of gas",
    registry=REGISTRY,
)

learning_rate = Gauge(
    "feemarket_learning_rate",
    "Current learning rate",
    registry=REGISTRY,
)

average_utilization = Gauge(
    "feemarket_average_utilization",
    "Share of window capacity consumed",
    registry=REGISTRY,
)

net_utilization = Gauge(
    "feemarket_net_utilization",
    "Gas consumed by the window above its target",
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Block Processing
# -----------------------------------------------------------------------------

market_updates = Counter(
    "feemarket_updates_total",
    "Total end-of-block base fee updates",
    registry=REGISTRY,
)

end_block_time = Histogram(
    "feemarket_end_block_seconds",
    "End-of-block update duration",
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Transactions
# -----------------------------------------------------------------------------

fee_checks = Counter(
    "feemarket_fee_checks_total",
    "Transactions checked against the base fee",
    registry=REGISTRY,
)

fee_rejections = Counter(
    "feemarket_fee_rejections_total",
    "Transactions rejected by fee admission or settlement",
    ["kind"],
    registry=REGISTRY,
)

fee_deductions = Counter(
    "feemarket_fee_deductions_total",
    "Fees escrowed in the fee collector",
    registry=REGISTRY,
)

fee_refunds = Counter(
    "feemarket_fee_refunds_total",
    "Non-zero refunds paid back to fee payers",
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
