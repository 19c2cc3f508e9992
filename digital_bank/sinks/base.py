"""Event sink protocol."""

from typing import Protocol

from digital_bank.models import Event


class EventSink(Protocol):
    """Destination for ledger events.

    ``publish`` raises :class:`~digital_bank.exceptions.SinkError` when the
    event cannot be handed off.
    """

    def publish(self, event: Event) -> None:
        ...

    def close(self) -> None:
        ...
