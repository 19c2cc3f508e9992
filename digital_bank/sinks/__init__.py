"""Destinations for ledger events."""

from digital_bank.sinks.base import EventSink
from digital_bank.sinks.console import ConsoleSink
from digital_bank.sinks.factory import SINK_KINDS, create_sink
from digital_bank.sinks.json_file import JsonFileSink
from digital_bank.sinks.kafka import KafkaSink

__all__ = ["SINK_KINDS", "ConsoleSink", "EventSink", "JsonFileSink", "KafkaSink", "create_sink"]
