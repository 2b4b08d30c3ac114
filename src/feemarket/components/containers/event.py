"""
Fee Market Events.

Events are the module's observable side channel: the host forwards them to
indexers and clients after each transaction and block.

::

    deduct_fees   --> tx_fee            {payer, required, tip}
    refund_fees   --> tx_refund         {payee, refund}
    end_block     --> fee_market_update {base_fee, learning_rate, height}
"""

from __future__ import annotations

from dataclasses import dataclass, field

EVENT_TYPE_TX_FEE = "tx_fee"
EVENT_TYPE_TX_REFUND = "tx_refund"
EVENT_TYPE_FEE_MARKET_UPDATE = "fee_market_update"

ATTRIBUTE_KEY_PAYER = "payer"
ATTRIBUTE_KEY_PAYEE = "payee"
ATTRIBUTE_KEY_REQUIRED = "required"
ATTRIBUTE_KEY_TIP = "tip"
ATTRIBUTE_KEY_REFUND = "refund"
ATTRIBUTE_KEY_BASE_FEE = "base_fee"
ATTRIBUTE_KEY_LEARNING_RATE = "learning_rate"
ATTRIBUTE_KEY_HEIGHT = "height"


@dataclass(frozen=True, slots=True)
class Event:
    """A typed event with ordered string attributes."""

    type: str
    """Event type, e.g. `tx_fee`."""

    attributes: tuple[tuple[str, str], ...] = ()
    """Key/value pairs in emission order."""

    @classmethod
    def new(cls, type: str, **attributes: object) -> Event:
        """Build an event, rendering every attribute value with `str`."""
        return cls(type=type, attributes=tuple((k, str(v)) for k, v in attributes.items()))

    def get(self, key: str) -> str | None:
        """Value of the first attribute named `key`, if any."""
        for attribute_key, value in self.attributes:
            if attribute_key == key:
                return value
        return None


@dataclass(slots=True)
class EventManager:
    """Collects events emitted while processing a transaction or block."""

    _events: list[Event] = field(default_factory=list)

    def emit(self, event: Event) -> None:
        """Append an event."""
        self._events.append(event)

    @property
    def events(self) -> tuple[Event, ...]:
        """All events emitted since the last drain."""
        return tuple(self._events)

    def of_type(self, type: str) -> list[Event]:
        """Events of one type, oldest first."""
        return [event for event in self._events if event.type == type]

    def drain(self) -> list[Event]:
        """Return and forget all collected events."""
        events, self._events = self._events, []
        return events
