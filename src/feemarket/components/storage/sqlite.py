"""
SQLite database implementation for fee market storage.

Params and state live in a single key-value table of the module keyspace.
Values are the canonical JSON encoding of the containers, so decoding a
stored value yields exactly the value that was stored.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from feemarket.components.containers import Params, State

from .namespaces import ALL_NAMESPACES, FEEMARKET

logger = logging.getLogger(__name__)


class SQLiteDatabase:
    """
    SQLite implementation of the Database protocol.

    Outside of `transaction()` every write is committed immediately.
    Inside it, writes are committed together when the block exits.
    """

    def __init__(self, path: Path | str) -> None:
        """
        Open the store at `path`, creating the keyspace table if needed.

        Args:
            path: SQLite file, or ":memory:" for a throwaway store.
        """
        self._path = Path(path) if isinstance(path, str) else path
        self._conn = sqlite3.connect(str(self._path))
        self._conn.row_factory = sqlite3.Row
        self._transaction_depth = 0
        self._init_schema()

    def _init_schema(self) -> None:
        """Create tables if they don't exist."""
        cursor = self._conn.cursor()
        for namespace in ALL_NAMESPACES:
            cursor.execute(namespace.CREATE_TABLE)
        self._conn.commit()

    # -------------------------------------------------------------------------
    # Key-value helpers
    # -------------------------------------------------------------------------

    def _get(self, key: str) -> bytes | None:
        cursor = self._conn.cursor()
        cursor.execute(
            f"SELECT data FROM {FEEMARKET.TABLE_NAME} WHERE key = ?",
            (key,),
        )
        row = cursor.fetchone()
        if row is None:
            return None
        return bytes(row["data"])

    def _put(self, key: str, data: bytes) -> None:
        cursor = self._conn.cursor()
        cursor.execute(
            f"INSERT OR REPLACE INTO {FEEMARKET.TABLE_NAME} (key, data) VALUES (?, ?)",
            (key, data),
        )

        # Writes outside a transaction are durable as soon as they return.
        if self._transaction_depth == 0:
            self._conn.commit()

    # -------------------------------------------------------------------------
    # Params Operations
    # -------------------------------------------------------------------------

    def get_params(self) -> Params | None:
        """Retrieve the stored parameters."""
        data = self._get(FEEMARKET.KEY_PARAMS)
        return None if data is None else Params.decode_bytes(data)

    def put_params(self, params: Params) -> None:
        """Store the parameters."""
        self._put(FEEMARKET.KEY_PARAMS, params.encode_bytes())

    # -------------------------------------------------------------------------
    # State Operations
    # -------------------------------------------------------------------------

    def get_state(self) -> State | None:
        """Retrieve the stored controller state."""
        data = self._get(FEEMARKET.KEY_STATE)
        return None if data is None else State.decode_bytes(data)

    def put_state(self, state: State) -> None:
        """Store the controller state."""
        self._put(FEEMARKET.KEY_STATE, state.encode_bytes())

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Commit all writes of the block together, or none of them.

        Nested transactions join the outermost one.
        """
        self._transaction_depth += 1
        try:
            yield
        except BaseException:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                logger.debug("Rolling back fee market storage transaction")
                self._conn.rollback()
            raise
        else:
            self._transaction_depth -= 1
            if self._transaction_depth == 0:
                self._conn.commit()

    def close(self) -> None:
        """Close database connection."""
        self._conn.close()

    def __enter__(self) -> SQLiteDatabase:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()
