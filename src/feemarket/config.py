"""
Host configuration for the fee market.

The host threads one `HostConfig` into the keeper at construction. It holds
the few values that are process-wide on a chain: the fee denomination, the
bech32 address prefix, the module account names and the authority allowed
to change parameters.
"""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import Field, model_validator

from feemarket.components.chain.config import (
    DEFAULT_BECH32_PREFIX,
    DEFAULT_FEE_DENOM,
    DISTRIBUTION_MODULE_NAME,
    FEE_COLLECTOR_NAME,
)
from feemarket.types import StrictBaseModel, is_valid_address

ENV_FEE_DENOM = "FEEMARKET_FEE_DENOM"
"""Environment variable overriding the fee denomination."""

ENV_BECH32_PREFIX = "FEEMARKET_BECH32_PREFIX"
"""Environment variable overriding the bech32 prefix."""

ENV_AUTHORITY = "FEEMARKET_AUTHORITY"
"""Environment variable naming the parameter-update authority."""


class HostConfig(StrictBaseModel):
    """Explicit, immutable configuration handed over by the host."""

    fee_denom: str = Field(default=DEFAULT_FEE_DENOM, min_length=1)
    """Denomination in which the base fee is quoted."""

    bech32_prefix: str = Field(default=DEFAULT_BECH32_PREFIX, min_length=1)
    """Human-readable part of account addresses."""

    fee_collector_name: str = FEE_COLLECTOR_NAME
    """Module account that escrows fees between deduction and refund."""

    distribution_module_name: str = DISTRIBUTION_MODULE_NAME
    """Module account receiving tips when no proposer is known."""

    authority: str | None = None
    """Address allowed to update parameters. Usually the governance module."""

    @model_validator(mode="after")
    def _check_authority(self) -> HostConfig:
        """The authority, when set, must be an address of this chain."""
        if self.authority is not None and not is_valid_address(
            self.authority, self.bech32_prefix
        ):
            raise ValueError(f"invalid authority address: {self.authority}")
        return self

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> HostConfig:
        """
        Build the configuration from environment variables.

        Unset variables fall back to the chain defaults.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ
        return cls(
            fee_denom=env.get(ENV_FEE_DENOM, DEFAULT_FEE_DENOM).strip(),
            bech32_prefix=env.get(ENV_BECH32_PREFIX, DEFAULT_BECH32_PREFIX).strip().lower(),
            authority=env.get(ENV_AUTHORITY) or None,
        )
