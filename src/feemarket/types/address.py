"""Account address checks against a bech32 human-readable prefix."""

from __future__ import annotations

BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
"""Characters allowed in the data part of a bech32 string."""

_MIN_DATA_LENGTH = 6
"""The data part always carries at least the 6-character checksum."""


def is_valid_address(address: str, prefix: str) -> bool:
    """
    Check that `address` looks like a bech32 account address for `prefix`.

    The human-readable part must equal `prefix`, followed by the `1`
    separator and a lowercase data part drawn from the bech32 charset.
    The checksum itself is verified by the host when decoding transactions.
    """
    if address != address.lower():
        return False

    hrp, sep, data = address.rpartition("1")
    if not sep or hrp != prefix:
        return False

    return len(data) >= _MIN_DATA_LENGTH and all(c in BECH32_CHARSET for c in data)


def validate_address(address: str, prefix: str) -> str:
    """
    Return `address` unchanged if valid.

    Raises:
        ValueError: If the address does not match the prefix or charset.
    """
    if not is_valid_address(address, prefix):
        raise ValueError(f"invalid {prefix} address: {address!r}")
    return address
