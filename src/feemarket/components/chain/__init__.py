"""Chain constants and default calibrations for the fee market."""

from .config import (
    DEFAULT_FEE_DENOM,
    FEE_COLLECTOR_NAME,
    MAX_BLOCK_UTILIZATION_RATIO,
    MAX_INT64,
    MODULE_NAME,
)

__all__ = [
    "DEFAULT_FEE_DENOM",
    "FEE_COLLECTOR_NAME",
    "MAX_BLOCK_UTILIZATION_RATIO",
    "MAX_INT64",
    "MODULE_NAME",
]
