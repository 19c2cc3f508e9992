"""Enumeration types for the account domain."""

from enum import Enum


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class UnknownFieldPolicy(str, Enum):
    """What the query engine does with a search or sort field it does not know."""

    PASS_THROUGH = "PASS_THROUGH"
    REJECT = "REJECT"


class LedgerOperation(str, Enum):
    DEPOSIT = "DEPOSIT"
    PAYMENT = "PAYMENT"
    TRANSFER = "TRANSFER"
