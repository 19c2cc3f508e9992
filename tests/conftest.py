"""Pytest configuration and fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable

import pytest
from argon2 import PasswordHasher as Argon2

from digital_bank.models import Account, Event
from digital_bank.repository import InMemoryAccountRepository
from digital_bank.security import Argon2PasswordHasher


@dataclass
class FlakyAccountRepository(InMemoryAccountRepository):
    """In-memory repository whose balance writes can be scripted to fail.

    ``balance_failures`` maps an account id to a queue of modes consumed
    one per ``set_balance`` call on that account:

    * ``None`` - normal write
    * ``"reject"`` - report failure without writing
    * ``"raise"`` - raise without writing
    * ``"apply_then_raise"`` - write, then raise (lost acknowledgement)
    * ``"hang"`` - never return

    ``fetch_failures`` does the same for ``fetch_by_id``, where ``"raise"``
    fails the read.
    """

    balance_failures: dict[str, list[str | None]] = field(default_factory=dict)
    balance_writes: list[tuple[str, Decimal]] = field(default_factory=list)
    fetch_failures: dict[str, list[str | None]] = field(default_factory=dict)

    async def fetch_by_id(self, account_id: str) -> Account | None:
        modes = self.fetch_failures.get(account_id)
        if modes and modes.pop(0) == "raise":
            await self._pause()
            raise ConnectionError("server closed the connection")
        return await super().fetch_by_id(account_id)

    async def set_balance(self, account_id: str, new_balance: Decimal) -> bool:
        modes = self.balance_failures.get(account_id)
        mode = modes.pop(0) if modes else None
        self.balance_writes.append((account_id, new_balance))

        if mode == "reject":
            await self._pause()
            return False
        if mode == "raise":
            await self._pause()
            raise ConnectionError("connection reset by peer")
        if mode == "hang":
            await asyncio.sleep(3600)
        if mode == "apply_then_raise":
            await super().set_balance(account_id, new_balance)
            raise ConnectionError("connection reset by peer")
        return await super().set_balance(account_id, new_balance)


class RecordingSink:
    """Event sink keeping every published event in memory."""

    def __init__(self) -> None:
        self.events: list[Event] = []
        self.closed = False

    def publish(self, event: Event) -> None:
        self.events.append(event)

    def close(self) -> None:
        self.closed = True

    @property
    def event_types(self) -> list[str]:
        return [event.event_type for event in self.events]


@pytest.fixture
def make_account() -> Callable[..., Account]:
    """Factory for accounts with unique ids and account numbers."""
    counter = {"n": 0}

    def _make(
        owner_name: str = "Test Owner",
        balance: Decimal | str | int = "0",
        email: str | None = None,
        account_id: str | None = None,
        account_number: str | None = None,
        bank: str = "BCA",
        password_digest: str = "!",
    ) -> Account:
        counter["n"] += 1
        n = counter["n"]
        return Account(
            account_id=account_id or f"acct-{n:03d}",
            owner_name=owner_name,
            account_number=account_number or f"{1000000000 + n}",
            bank=bank,
            balance=Decimal(str(balance)),
            password_digest=password_digest,
            email=email if email is not None else f"owner{n}@test.com",
            created_at=datetime(2024, 1, 1, 12, 0, n % 60),
        )

    return _make


@pytest.fixture
def repository() -> InMemoryAccountRepository:
    """Fresh empty repository for each test."""
    return InMemoryAccountRepository()


@pytest.fixture
def flaky_repository() -> FlakyAccountRepository:
    return FlakyAccountRepository()


@pytest.fixture
def hasher() -> Argon2PasswordHasher:
    """Argon2 hasher with minimal cost so tests stay fast."""
    return Argon2PasswordHasher(Argon2(time_cost=1, memory_cost=8, parallelism=1))


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible generators."""
    return 42
