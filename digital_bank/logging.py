"""Logging setup for digital-bank.

Ledger code attaches structured fields to its records::

    logger.info(
        "Deposit committed",
        extra=ledger_fields(LedgerOperation.DEPOSIT, account_id, amount, balance=balance),
    )

The standard format ignores them; the JSON format emits them as top-level
keys, with amounts as exact decimal strings.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, TextIO

from digital_bank.exceptions import ConfigurationError
from digital_bank.models.enums import LedgerOperation
from digital_bank.sinks.serialization import serialize_value

LOG_FORMATS = ("standard", "json")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Drivers and helpers that are chatty at DEBUG
QUIET_LOGGERS = ("confluent_kafka", "psycopg", "faker", "asyncio")


def ledger_fields(
    operation: LedgerOperation,
    account_id: str,
    amount: Decimal | None = None,
    **fields: Any,
) -> dict[str, dict[str, Any]]:
    """Build the ``extra`` mapping for a ledger log record.

    Fields whose value is None are left out.
    """
    data: dict[str, Any] = {"operation": operation, "account_id": account_id}
    if amount is not None:
        data["amount"] = amount
    data.update((key, value) for key, value in fields.items() if value is not None)
    return {"extra": data}


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: TextIO | None = None,
) -> None:
    """Configure the root logger for digital-bank.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        ``standard`` or ``json``.
    stream : TextIO | None
        Destination, stdout by default.

    Raises
    ------
    ConfigurationError
        Unknown ``format_type``.
    """
    if format_type not in LOG_FORMATS:
        raise ConfigurationError(
            f"Unknown log format {format_type!r}; expected one of {', '.join(LOG_FORMATS)}"
        )
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    logging.getLogger("digital_bank").setLevel(log_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ledger fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            entry.update({key: serialize_value(value) for key, value in fields.items()})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)
