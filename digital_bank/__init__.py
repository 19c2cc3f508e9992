"""digital-bank: account listing, ledger operations and account lifecycle."""

from digital_bank.config import DigitalBankConfig
from digital_bank.exceptions import (
    AccountNotFoundError,
    DigitalBankError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidArgumentError,
    PartialTransferError,
    PersistenceError,
)
from digital_bank.repository import AccountRepository, InMemoryAccountRepository
from digital_bank.services import DigitalBankService

__version__ = "0.1.0"

__all__ = [
    "AccountNotFoundError",
    "AccountRepository",
    "DigitalBankConfig",
    "DigitalBankError",
    "DigitalBankService",
    "DuplicateAccountError",
    "InMemoryAccountRepository",
    "InsufficientFundsError",
    "InvalidArgumentError",
    "PartialTransferError",
    "PersistenceError",
]
