"""Single entry point over listing, lookups, lifecycle and ledger."""

from __future__ import annotations

from decimal import Decimal

from digital_bank.config import DigitalBankConfig
from digital_bank.models import AccountDetail, BalanceView, LedgerReceipt, PageSummary
from digital_bank.repository import AccountRepository
from digital_bank.security import PasswordHasher
from digital_bank.services.accounts import AccountService
from digital_bank.services.ledger import LedgerService
from digital_bank.services.locks import AccountLockManager
from digital_bank.services.query import AccountQueryEngine, SearchSpec, SortSpec
from digital_bank.sinks import EventSink


class DigitalBankService:
    """Wire the account services to one repository and one lock manager.

    The three sub-services are exposed as ``query``, ``accounts`` and
    ``ledger``; the methods below delegate to them.
    """

    def __init__(
        self,
        repository: AccountRepository,
        config: DigitalBankConfig | None = None,
        hasher: PasswordHasher | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.config = config if config is not None else DigitalBankConfig()
        self.locks = AccountLockManager()
        self.query = AccountQueryEngine(repository, self.config.query)
        self.accounts = AccountService(repository, hasher=hasher, locks=self.locks)
        self.ledger = LedgerService(repository, locks=self.locks, config=self.config.ledger, sink=sink)

    async def get_bank_accounts(
        self,
        page_number: int,
        page_size: int,
        search: str | SearchSpec | None = None,
        sort: str | SortSpec | None = None,
    ) -> PageSummary:
        return await self.query.list_page_summary(search, sort, page_number, page_size)

    async def get_bank_accounts_with_pagination(
        self,
        page_number: int,
        page_size: int,
        search: str | SearchSpec | None = None,
        sort: str | SortSpec | None = None,
    ) -> list[AccountDetail]:
        return await self.query.list_page(search, sort, page_number, page_size)

    async def get_bank_account(self, account_id: str) -> AccountDetail | None:
        return await self.accounts.get_by_id(account_id)

    async def get_bank_account_by_account_number(self, account_number: str) -> AccountDetail | None:
        return await self.accounts.get_by_account_number(account_number)

    async def get_balance(self, account_number: str) -> BalanceView | None:
        return await self.accounts.get_balance(account_number)

    async def create_bank_account(
        self,
        owner_name: str,
        account_number: str,
        bank: str,
        balance: Decimal | int | str,
        password: str,
        email: str | None = None,
    ) -> AccountDetail:
        return await self.accounts.create_account(
            owner_name, account_number, bank, balance, password, email=email
        )

    async def update_bank_account(
        self, account_id: str, name: str, email: str | None, account_number: str
    ) -> None:
        await self.accounts.update_account(account_id, name, email, account_number)

    async def delete_bank_account(self, account_id: str) -> None:
        await self.accounts.delete_account(account_id)

    async def email_is_registered(self, email: str) -> bool:
        return await self.accounts.email_is_registered(email)

    async def account_number_is_registered(self, account_number: str) -> bool:
        return await self.accounts.account_number_is_registered(account_number)

    async def check_password(self, account_id: str, password: str) -> bool:
        return await self.accounts.check_password(account_id, password)

    async def change_password(self, account_id: str, password: str) -> None:
        await self.accounts.change_password(account_id, password)

    async def deposit(self, account_id: str, amount: Decimal | int | str) -> LedgerReceipt:
        return await self.ledger.deposit(account_id, amount)

    async def payment(self, account_id: str, amount: Decimal | int | str) -> LedgerReceipt:
        return await self.ledger.payment(account_id, amount)

    async def transfer_balance(
        self, source_id: str, target_id: str, amount: Decimal | int | str
    ) -> LedgerReceipt:
        return await self.ledger.transfer(source_id, target_id, amount)
