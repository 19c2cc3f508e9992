"""Account repository protocol.

The repository is the system of record for accounts. Every method is a
coroutine and therefore a potential suspension point; callers must not
assume two calls observe the same state unless they hold the account's
lock from :class:`digital_bank.services.locks.AccountLockManager`.
"""

from decimal import Decimal
from typing import Protocol, Sequence

from digital_bank.models import Account


class AccountRepository(Protocol):
    """Interface for account data access."""

    async def fetch_all(self) -> Sequence[Account]:
        """Return every account, in storage order."""
        ...

    async def fetch_by_id(self, account_id: str) -> Account | None:
        ...

    async def fetch_by_account_number(self, account_number: str) -> Account | None:
        ...

    async def fetch_by_email(self, email: str) -> Account | None:
        ...

    async def create(
        self,
        owner_name: str,
        account_number: str,
        bank: str,
        balance: Decimal,
        password_digest: str,
        email: str | None = None,
    ) -> Account | None:
        """Persist a new account and return it, or None when the write failed."""
        ...

    async def update(
        self, account_id: str, name: str, email: str | None, account_number: str
    ) -> bool:
        ...

    async def delete(self, account_id: str) -> bool:
        ...

    async def set_password(self, account_id: str, digest: str) -> bool:
        ...

    async def set_balance(self, account_id: str, new_balance: Decimal) -> bool:
        """Overwrite the balance of one account. The only balance mutation."""
        ...
