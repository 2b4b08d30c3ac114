"""
Database namespace definitions for storage tables.

Defines table names and schema constants for SQLite storage.
The fee market keeps its two singleton values in one key-value table.
"""

from __future__ import annotations

from dataclasses import dataclass

from feemarket.components.chain.config import MODULE_NAME


@dataclass(frozen=True, slots=True)
class FeeMarketNamespace:
    """
    Namespace for the fee market keyspace.

    Params and state are stored under fixed keys as canonical JSON bytes.
    """

    TABLE_NAME: str = MODULE_NAME
    """Table name for the module keyspace."""

    KEY_PARAMS: str = "params"
    """Key for the parameters slot."""

    KEY_STATE: str = "state"
    """Key for the controller state slot."""

    CREATE_TABLE: str = f"""
        CREATE TABLE IF NOT EXISTS {MODULE_NAME} (
            key TEXT PRIMARY KEY,
            data BLOB NOT NULL
        )
    """
    """SQL to create the keyspace table."""


FEEMARKET = FeeMarketNamespace()

ALL_NAMESPACES = [FEEMARKET]
"""All namespace definitions for schema initialization."""
