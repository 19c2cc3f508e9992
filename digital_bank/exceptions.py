"""Custom exception hierarchy for digital-bank."""


class DigitalBankError(Exception):
    """Base exception for all digital-bank errors."""


class AccountNotFoundError(DigitalBankError):
    """Raised when a referenced account does not exist."""

    def __init__(self, account_ref: str) -> None:
        super().__init__(f"Account {account_ref} not found")
        self.account_ref = account_ref


class InsufficientFundsError(DigitalBankError):
    """Raised when a payment or transfer exceeds the available balance."""


class InvalidArgumentError(DigitalBankError, ValueError):
    """Raised for non-positive amounts, bad page sizes and similar input."""


class DuplicateAccountError(DigitalBankError):
    """Raised when an account number or email is already registered."""


class PersistenceError(DigitalBankError):
    """Raised when a repository write did not succeed."""


class PartialTransferError(PersistenceError):
    """Raised when a transfer debit committed but the credit did not.

    ``compensated`` tells whether the source balance was restored.
    """

    def __init__(self, message: str, *, compensated: bool) -> None:
        super().__init__(message)
        self.compensated = compensated


class ConfigurationError(DigitalBankError):
    """Raised when configuration is invalid or missing."""


class SinkError(DigitalBankError):
    """Raised when a sink operation fails."""
