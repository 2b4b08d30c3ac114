"""
Abstract database interface for fee market storage.

The keeper only depends on this Protocol, so hosts may back the two
slots with their own key-value store.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from feemarket.components.containers import Params, State


class Database(Protocol):
    """
    Protocol for fee market storage.

    Storage Organization
    --------------------
    - Params: singleton slot, replaced by authority updates
    - State: singleton slot, replaced on every gas record and block end
    """

    # -------------------------------------------------------------------------
    # Params Operations
    # -------------------------------------------------------------------------

    def get_params(self) -> Params | None:
        """
        Retrieve the stored parameters.

        Returns:
            Params if set, None otherwise.
        """
        ...

    def put_params(self, params: Params) -> None:
        """
        Store the parameters, replacing any previous value.

        Args:
            params: Parameters to store.
        """
        ...

    # -------------------------------------------------------------------------
    # State Operations
    # -------------------------------------------------------------------------

    def get_state(self) -> State | None:
        """
        Retrieve the stored controller state.

        Returns:
            State if set, None otherwise.
        """
        ...

    def put_state(self, state: State) -> None:
        """
        Store the controller state, replacing any previous value.

        Args:
            state: State to store.
        """
        ...

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def transaction(self) -> AbstractContextManager[None]:
        """
        Group writes atomically.

        All writes inside the block are committed together when it exits
        normally, and discarded when it raises.
        """
        ...

    def close(self) -> None:
        """Close the database connection."""
        ...
