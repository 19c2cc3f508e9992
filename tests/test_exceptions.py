"""Tests for custom exception hierarchy."""

import pytest

from digital_bank.exceptions import (
    AccountNotFoundError,
    ConfigurationError,
    DigitalBankError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidArgumentError,
    PartialTransferError,
    PersistenceError,
    SinkError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_digital_bank_error_is_exception(self) -> None:
        assert isinstance(DigitalBankError("test"), Exception)

    @pytest.mark.parametrize(
        "error",
        [
            InsufficientFundsError("test"),
            DuplicateAccountError("test"),
            PersistenceError("test"),
            ConfigurationError("test"),
            SinkError("test"),
        ],
    )
    def test_is_digital_bank_error(self, error) -> None:
        assert isinstance(error, DigitalBankError)

    def test_invalid_argument_is_value_error(self) -> None:
        err = InvalidArgumentError("page_size must be positive")
        assert isinstance(err, ValueError)
        assert isinstance(err, DigitalBankError)

    def test_partial_transfer_is_persistence_error(self) -> None:
        err = PartialTransferError("credit failed", compensated=True)
        assert isinstance(err, PersistenceError)
        assert err.compensated is True
        assert str(err) == "credit failed"

    def test_partial_transfer_requires_compensated_keyword(self) -> None:
        with pytest.raises(TypeError):
            PartialTransferError("credit failed", True)

    def test_account_not_found_message(self) -> None:
        err = AccountNotFoundError("acct-001")
        assert str(err) == "Account acct-001 not found"
        assert err.account_ref == "acct-001"
