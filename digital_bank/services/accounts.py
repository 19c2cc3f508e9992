"""Account lookups and lifecycle: create, update, delete, credentials."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Awaitable, TypeVar

from digital_bank.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    PersistenceError,
)
from digital_bank.models import Account, AccountDetail, BalanceView
from digital_bank.repository import AccountRepository
from digital_bank.security import Argon2PasswordHasher, PasswordHasher
from digital_bank.services.ledger import parse_amount
from digital_bank.services.locks import AccountLockManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _persist(awaitable: Awaitable[T], action: str) -> T:
    """Await a repository write, turning failure of any kind into PersistenceError."""
    try:
        result = await awaitable
    except Exception as exc:
        logger.error("Failed to %s: %s", action, exc)
        raise PersistenceError(f"Failed to {action}: {exc}") from exc
    if not result:
        logger.error("Failed to %s: write rejected", action)
        raise PersistenceError(f"Failed to {action}")
    return result


class AccountService:
    """Read projections and lifecycle operations for accounts.

    Parameters
    ----------
    repository : AccountRepository
        System of record.
    hasher : PasswordHasher | None
        Defaults to :class:`Argon2PasswordHasher`.
    locks : AccountLockManager | None
        Share the ledger's manager so lifecycle writes cannot interleave
        with a balance update on the same account.
    """

    def __init__(
        self,
        repository: AccountRepository,
        hasher: PasswordHasher | None = None,
        locks: AccountLockManager | None = None,
    ) -> None:
        self.repository = repository
        self.hasher = hasher if hasher is not None else Argon2PasswordHasher()
        self.locks = locks if locks is not None else AccountLockManager()

    async def _require(self, account_id: str) -> Account:
        account = await self.repository.fetch_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    # Lookups return None for a missing account

    async def get_by_id(self, account_id: str) -> AccountDetail | None:
        account = await self.repository.fetch_by_id(account_id)
        return AccountDetail.from_account(account) if account else None

    async def get_by_account_number(self, account_number: str) -> AccountDetail | None:
        account = await self.repository.fetch_by_account_number(account_number)
        return AccountDetail.from_account(account) if account else None

    async def get_balance(self, account_number: str) -> BalanceView | None:
        account = await self.repository.fetch_by_account_number(account_number)
        return BalanceView.from_account(account) if account else None

    async def email_is_registered(self, email: str) -> bool:
        return await self.repository.fetch_by_email(email) is not None

    async def account_number_is_registered(self, account_number: str) -> bool:
        return await self.repository.fetch_by_account_number(account_number) is not None

    async def create_account(
        self,
        owner_name: str,
        account_number: str,
        bank: str,
        balance: Decimal | int | str,
        password: str,
        email: str | None = None,
    ) -> AccountDetail:
        """Hash the password and store a new account.

        Raises
        ------
        InvalidArgumentError
            Negative or non-numeric opening balance.
        DuplicateAccountError
            Account number or email already registered.
        PersistenceError
            The repository did not store the account.
        """
        opening = parse_amount(balance, allow_zero=True)
        if await self.account_number_is_registered(account_number):
            raise DuplicateAccountError(f"Account number {account_number} already registered")
        if email and await self.email_is_registered(email):
            raise DuplicateAccountError(f"Email {email} already registered")

        digest = self.hasher.hash(password)
        account = await _persist(
            self.repository.create(owner_name, account_number, bank, opening, digest, email=email),
            f"create account {account_number}",
        )
        logger.info("Created account %s (%s)", account.account_id, account_number)
        return AccountDetail.from_account(account)

    async def update_account(
        self, account_id: str, name: str, email: str | None, account_number: str
    ) -> None:
        """Overwrite owner name, email and account number."""
        async with self.locks.hold(account_id):
            await self._require(account_id)

            owner = await self.repository.fetch_by_account_number(account_number)
            if owner is not None and owner.account_id != account_id:
                raise DuplicateAccountError(f"Account number {account_number} already registered")
            if email:
                owner = await self.repository.fetch_by_email(email)
                if owner is not None and owner.account_id != account_id:
                    raise DuplicateAccountError(f"Email {email} already registered")

            await _persist(
                self.repository.update(account_id, name, email, account_number),
                f"update account {account_id}",
            )
        logger.info("Updated account %s", account_id)

    async def delete_account(self, account_id: str) -> None:
        async with self.locks.hold(account_id):
            await self._require(account_id)
            await _persist(self.repository.delete(account_id), f"delete account {account_id}")
        logger.info("Deleted account %s", account_id)

    async def change_password(self, account_id: str, password: str) -> None:
        async with self.locks.hold(account_id):
            await self._require(account_id)
            digest = self.hasher.hash(password)
            await _persist(
                self.repository.set_password(account_id, digest),
                f"change password of account {account_id}",
            )
        logger.info("Changed password of account %s", account_id)

    async def check_password(self, account_id: str, password: str) -> bool:
        """Compare ``password`` with the stored digest.

        Raises
        ------
        AccountNotFoundError
            No such account.
        """
        account = await self._require(account_id)
        return self.hasher.matches(password, account.password_digest)
