"""Account services."""

from digital_bank.services.accounts import AccountService
from digital_bank.services.bank import DigitalBankService
from digital_bank.services.ledger import LedgerService, parse_amount
from digital_bank.services.locks import AccountLockManager
from digital_bank.services.query import (
    AccountQueryEngine,
    SearchSpec,
    SortSpec,
    parse_search,
    parse_sort,
)

__all__ = [
    "AccountLockManager",
    "AccountQueryEngine",
    "AccountService",
    "DigitalBankService",
    "LedgerService",
    "SearchSpec",
    "SortSpec",
    "parse_amount",
    "parse_search",
    "parse_sort",
]
