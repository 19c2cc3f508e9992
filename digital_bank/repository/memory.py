"""In-memory account repository with account-number and email indexes."""

import asyncio
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from digital_bank.exceptions import DuplicateAccountError
from digital_bank.models import Account


@dataclass
class InMemoryAccountRepository:
    """Dict-backed repository.

    Every call awaits ``asyncio.sleep(latency)`` first, so each call is a
    real suspension point just like a network round trip. Writes that
    would break storage constraints (duplicate account number or email,
    negative balance) report failure instead of raising.
    """

    latency: float = 0.0

    accounts: dict[str, Account] = field(default_factory=dict)

    # Secondary indexes
    _by_number: dict[str, str] = field(default_factory=dict)
    _by_email: dict[str, str] = field(default_factory=dict)

    def add_account(self, account: Account) -> None:
        """Insert a ready-made account synchronously (fixtures, seeding)."""
        if account.account_number in self._by_number:
            raise DuplicateAccountError(f"Account number {account.account_number} already registered")
        if account.email and account.email in self._by_email:
            raise DuplicateAccountError(f"Email {account.email} already registered")

        self.accounts[account.account_id] = account
        self._by_number[account.account_number] = account.account_id
        if account.email:
            self._by_email[account.email] = account.account_id

    def seed(self, accounts: Iterable[Account]) -> None:
        """Insert many accounts."""
        for account in accounts:
            self.add_account(account)

    async def _pause(self) -> None:
        await asyncio.sleep(self.latency)

    async def fetch_all(self) -> list[Account]:
        await self._pause()
        return list(self.accounts.values())

    async def fetch_by_id(self, account_id: str) -> Account | None:
        await self._pause()
        return self.accounts.get(account_id)

    async def fetch_by_account_number(self, account_number: str) -> Account | None:
        await self._pause()
        account_id = self._by_number.get(account_number)
        return self.accounts.get(account_id) if account_id else None

    async def fetch_by_email(self, email: str) -> Account | None:
        await self._pause()
        account_id = self._by_email.get(email)
        return self.accounts.get(account_id) if account_id else None

    async def create(
        self,
        owner_name: str,
        account_number: str,
        bank: str,
        balance: Decimal,
        password_digest: str,
        email: str | None = None,
    ) -> Account | None:
        await self._pause()
        if account_number in self._by_number or (email and email in self._by_email):
            return None
        if balance < 0:
            return None

        account = Account(
            account_id=uuid.uuid4().hex,
            owner_name=owner_name,
            account_number=account_number,
            bank=bank,
            balance=balance,
            password_digest=password_digest,
            email=email,
            created_at=datetime.now(),
        )
        self.add_account(account)
        return account

    async def update(
        self, account_id: str, name: str, email: str | None, account_number: str
    ) -> bool:
        await self._pause()
        current = self.accounts.get(account_id)
        if current is None:
            return False
        if self._by_number.get(account_number, account_id) != account_id:
            return False
        if email and self._by_email.get(email, account_id) != account_id:
            return False

        del self._by_number[current.account_number]
        if current.email:
            del self._by_email[current.email]

        updated = replace(
            current,
            owner_name=name,
            email=email,
            account_number=account_number,
            updated_at=datetime.now(),
        )
        self.accounts[account_id] = updated
        self._by_number[account_number] = account_id
        if email:
            self._by_email[email] = account_id
        return True

    async def delete(self, account_id: str) -> bool:
        await self._pause()
        account = self.accounts.pop(account_id, None)
        if account is None:
            return False
        del self._by_number[account.account_number]
        if account.email:
            del self._by_email[account.email]
        return True

    async def set_password(self, account_id: str, digest: str) -> bool:
        await self._pause()
        current = self.accounts.get(account_id)
        if current is None:
            return False
        self.accounts[account_id] = replace(
            current, password_digest=digest, updated_at=datetime.now()
        )
        return True

    async def set_balance(self, account_id: str, new_balance: Decimal) -> bool:
        await self._pause()
        current = self.accounts.get(account_id)
        if current is None or new_balance < 0:
            return False
        self.accounts[account_id] = replace(
            current, balance=new_balance, updated_at=datetime.now()
        )
        return True

    def summary(self) -> dict[str, object]:
        """Return count and total balance held."""
        return {
            "accounts": len(self.accounts),
            "total_balance": sum((a.balance for a in self.accounts.values()), Decimal("0")),
        }
