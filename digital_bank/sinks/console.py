"""Console sink for debugging and development."""

import json

from digital_bank.exceptions import SinkError
from digital_bank.models import Event
from digital_bank.sinks.serialization import to_dict


class ConsoleSink:
    """Print ledger events to stdout as JSON."""

    def __init__(self, pretty: bool = True) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        """
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def publish(self, event: Event) -> None:
        data = to_dict(event)
        indent = 2 if self.pretty else None
        try:
            print(json.dumps(data, indent=indent, ensure_ascii=False), flush=True)
        except (OSError, ValueError) as exc:
            raise SinkError(f"Failed to print event {event.event_id}: {exc}") from exc
        self._counts[event.event_type] = self._counts.get(event.event_type, 0) + 1

    def close(self) -> None:
        """Print summary and close."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for event_type, count in self._counts.items():
            print(f"  {event_type}: {count} events")
