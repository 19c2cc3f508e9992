"""Build the configured ledger event sink."""

from digital_bank.config import DigitalBankConfig
from digital_bank.exceptions import ConfigurationError
from digital_bank.sinks.base import EventSink
from digital_bank.sinks.console import ConsoleSink
from digital_bank.sinks.json_file import JsonFileSink
from digital_bank.sinks.kafka import KafkaSink

SINK_KINDS = ("none", "console", "jsonl", "kafka")


def create_sink(kind: str, config: DigitalBankConfig | None = None) -> EventSink | None:
    """Create a sink by name.

    Parameters
    ----------
    kind : str
        One of ``none``, ``console``, ``jsonl`` or ``kafka``.
    config : DigitalBankConfig | None
        Supplies the topic, output directory and producer settings.

    Returns
    -------
    EventSink | None
        ``None`` for ``none``.
    """
    config = config if config is not None else DigitalBankConfig()
    kind = kind.lower()
    if kind == "none":
        return None
    if kind == "console":
        return ConsoleSink(pretty=config.output.pretty_json)
    if kind == "jsonl":
        return JsonFileSink(config.output.json_output_dir, topic=config.ledger.event_topic)
    if kind == "kafka":
        return KafkaSink(config.kafka, topic=config.ledger.event_topic)
    raise ConfigurationError(f"Unknown sink {kind!r}; expected one of {', '.join(SINK_KINDS)}")
