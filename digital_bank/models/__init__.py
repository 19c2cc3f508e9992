"""Domain models for digital-bank."""

from digital_bank.models.account import (
    Account,
    AccountDetail,
    AccountSummary,
    BalanceView,
    LedgerReceipt,
    PageSummary,
)
from digital_bank.models.base import Event
from digital_bank.models.enums import LedgerOperation, SortOrder, UnknownFieldPolicy

__all__ = [
    "Account",
    "AccountDetail",
    "AccountSummary",
    "BalanceView",
    "Event",
    "LedgerOperation",
    "LedgerReceipt",
    "PageSummary",
    "SortOrder",
    "UnknownFieldPolicy",
]
