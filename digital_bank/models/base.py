"""Base models shared across the package."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Event:
    """Standard event envelope for ledger streams."""

    event_id: str
    event_type: str  # entity.action (e.g., account.deposited)
    event_time: datetime
    source: str  # Service/system that generated
    subject: str  # Account ID affected
    data: dict
    metadata: dict = field(default_factory=dict)
