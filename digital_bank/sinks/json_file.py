"""JSON Lines audit log of ledger events."""

import json
import logging
from pathlib import Path

from digital_bank.exceptions import SinkError
from digital_bank.models import Event
from digital_bank.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Append each event as one JSON line to ``<output_dir>/<topic>.jsonl``."""

    def __init__(self, output_dir: str | Path, topic: str = "banking.ledger-events") -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write the log file into.
        topic : str
            Log name; dots become underscores in the file name.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.file_path = self.output_dir / (topic.replace(".", "_") + ".jsonl")
        self._file = open(self.file_path, "a", encoding="utf-8")
        self.count = 0

    def publish(self, event: Event) -> None:
        try:
            self._file.write(json.dumps(to_dict(event), ensure_ascii=False) + "\n")
            self._file.flush()
        except (OSError, ValueError) as exc:
            raise SinkError(f"Failed to write event {event.event_id}: {exc}") from exc
        self.count += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
        logger.info("Ledger log %s closed: %d events written", self.file_path, self.count)
