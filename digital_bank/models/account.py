"""Account snapshot and its read projections."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from digital_bank.models.enums import LedgerOperation


@dataclass(frozen=True)
class Account:
    """Bank account record as stored by a repository.

    Instances are read snapshots. Services never mutate them; a new
    balance or credential is written through the repository and a fresh
    snapshot is fetched afterwards.
    """

    account_id: str
    owner_name: str
    account_number: str
    bank: str
    balance: Decimal
    password_digest: str
    email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class AccountSummary:
    """Listing row used by page-summary mode (no email)."""

    id: str
    owner_name: str
    account_number: str
    balance: Decimal

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(
            id=account.account_id,
            owner_name=account.owner_name,
            account_number=account.account_number,
            balance=account.balance,
        )


@dataclass(frozen=True)
class AccountDetail:
    """Full public view of an account."""

    id: str
    owner_name: str
    email: str | None
    account_number: str
    balance: Decimal

    @classmethod
    def from_account(cls, account: Account) -> "AccountDetail":
        return cls(
            id=account.account_id,
            owner_name=account.owner_name,
            email=account.email,
            account_number=account.account_number,
            balance=account.balance,
        )


@dataclass(frozen=True)
class BalanceView:
    """Balance inquiry result."""

    id: str
    owner_name: str
    email: str | None
    balance: Decimal

    @classmethod
    def from_account(cls, account: Account) -> "BalanceView":
        return cls(
            id=account.account_id,
            owner_name=account.owner_name,
            email=account.email,
            balance=account.balance,
        )


@dataclass(frozen=True)
class PageSummary:
    """Page-summary listing: every matching row plus pagination metadata."""

    results: list[AccountSummary]
    total_pages: int
    has_previous_pages: bool
    has_next_pages: bool


@dataclass(frozen=True)
class LedgerReceipt:
    """Confirmation of a committed ledger operation."""

    operation: LedgerOperation
    account_id: str
    amount: Decimal
    balance: Decimal  # resulting balance of account_id
    created_at: datetime
    counterparty_id: str | None = None
    counterparty_balance: Decimal | None = None
