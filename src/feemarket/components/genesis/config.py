"""Genesis state loader.

Loads the fee market genesis from YAML documents. Field names follow the
camelCase convention of the stored encoding:

    params:
      window: 8
      alpha: "0.025"
      ...
      feeDenom: stake
      enabled: true
    state:
      window: [0, 0, 0, 0, 0, 0, 0, 0]
      index: 0
      baseFee: "1000000000"
      ...

The `state` section may be omitted; it is then generated from `params`.
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from feemarket.components.chain.config import DEFAULT_FEE_DENOM
from feemarket.components.containers import Params, State, default_params
from feemarket.types import StrictBaseModel


class _GenesisLoader(yaml.SafeLoader):
    """Safe loader that keeps unquoted floats as their source text."""


def _float_as_text(loader: yaml.SafeLoader, node: yaml.ScalarNode) -> str:
    return loader.construct_scalar(node)


_GenesisLoader.add_constructor("tag:yaml.org,2002:float", _float_as_text)


def _decimals_as_text(section: Any) -> Any:
    """
    Turn floats of already parsed data into plain decimal strings.

    Decimals never accept floats. Documents read through `_GenesisLoader`
    carry no floats; JSON or hand-built mappings may, and are written out
    in positional notation since decimals reject exponents.
    """
    if not isinstance(section, dict):
        raise ValueError(f"genesis section must be a mapping, got {type(section).__name__}")
    return {
        key: format(Decimal(repr(value)), "f") if isinstance(value, float) else value
        for key, value in section.items()
    }


class GenesisState(StrictBaseModel):
    """
    The fee market's contribution to the chain genesis.

    Exporting the genesis of a running chain and importing it into a new
    one resumes the controller exactly where it stopped.
    """

    params: Params
    """Parameters in force at genesis."""

    state: State
    """Controller state at genesis."""

    @classmethod
    def default(cls, fee_denom: str = DEFAULT_FEE_DENOM) -> GenesisState:
        """Classic EIP-1559 parameters with their genesis state."""
        params = default_params(fee_denom)
        return cls(params=params, state=State.generate_genesis(params))

    def validate(self) -> None:
        """
        Check the parameters, then the state against them.

        Raises:
            InvalidParamsError: If the parameters are inconsistent.
            InvalidStateError: If the state violates an invariant.
        """
        self.params.validate()
        self.state.validate(self.params)

    @classmethod
    def from_mapping(cls, data: Any) -> GenesisState:
        """
        Build the genesis from parsed YAML or JSON data.

        Raises:
            ValueError: If a section is not a mapping.
            pydantic.ValidationError: If a section fails validation.
        """
        if not isinstance(data, dict) or "params" not in data:
            raise ValueError("genesis must be a mapping with a 'params' section")

        params = Params.model_validate(_decimals_as_text(data["params"]))
        if data.get("state") is None:
            state = State.generate_genesis(params)
        else:
            state = State.model_validate(_decimals_as_text(data["state"]))
        return cls(params=params, state=state)

    @classmethod
    def from_yaml_file(cls, path: Path | str) -> GenesisState:
        """
        Load the genesis from a YAML file.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.load(f, Loader=_GenesisLoader)
        return cls.from_mapping(data)

    @classmethod
    def from_yaml(cls, content: str) -> GenesisState:
        """
        Load the genesis from a YAML string.

        Useful for testing or programmatic config generation.
        """
        return cls.from_mapping(yaml.load(content, Loader=_GenesisLoader))

    def to_yaml(self) -> str:
        """Render the genesis as YAML, decimals quoted as canonical strings."""
        return yaml.safe_dump(
            self.model_dump(mode="json", by_alias=True),
            sort_keys=False,
        )
