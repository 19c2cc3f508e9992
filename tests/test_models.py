"""Tests for account models and projections."""

import dataclasses
from datetime import datetime
from decimal import Decimal

import pytest

from digital_bank.models import (
    Account,
    AccountDetail,
    AccountSummary,
    BalanceView,
    Event,
    LedgerOperation,
    LedgerReceipt,
    PageSummary,
    SortOrder,
    UnknownFieldPolicy,
)


@pytest.fixture
def account() -> Account:
    return Account(
        account_id="acct-001",
        owner_name="Ann Lee",
        account_number="1234567890",
        bank="BCA",
        balance=Decimal("150.25"),
        password_digest="$argon2id$secret",
        email="ann@test.com",
        created_at=datetime(2024, 1, 1),
    )


class TestAccount:
    """Tests for the Account snapshot."""

    def test_is_frozen(self, account: Account) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            account.balance = Decimal("0")

    def test_optional_fields_default(self) -> None:
        account = Account("a", "Ann", "1", "BCA", Decimal("0"), "!")

        assert account.email is None
        assert account.created_at is None
        assert account.updated_at is None


class TestProjections:
    """Tests for the read projections."""

    def test_summary(self, account: Account) -> None:
        summary = AccountSummary.from_account(account)

        assert summary == AccountSummary(
            id="acct-001", owner_name="Ann Lee", account_number="1234567890", balance=Decimal("150.25")
        )

    def test_detail(self, account: Account) -> None:
        detail = AccountDetail.from_account(account)

        assert detail.id == "acct-001"
        assert detail.email == "ann@test.com"
        assert detail.balance == Decimal("150.25")

    def test_balance_view(self, account: Account) -> None:
        view = BalanceView.from_account(account)

        assert view == BalanceView(
            id="acct-001", owner_name="Ann Lee", email="ann@test.com", balance=Decimal("150.25")
        )

    @pytest.mark.parametrize("projection", [AccountSummary, AccountDetail, BalanceView])
    def test_projections_never_expose_digest(self, account: Account, projection) -> None:
        """Test that no projection carries the password digest or bank internals."""
        field_names = {f.name for f in dataclasses.fields(projection)}

        assert "password_digest" not in field_names
        assert "$argon2id$secret" not in repr(projection.from_account(account))

    def test_page_summary(self, account: Account) -> None:
        page = PageSummary(
            results=[AccountSummary.from_account(account)],
            total_pages=1,
            has_previous_pages=False,
            has_next_pages=False,
        )

        assert page.results[0].id == "acct-001"


class TestReceiptAndEvent:
    """Tests for LedgerReceipt and Event."""

    def test_receipt_defaults(self) -> None:
        receipt = LedgerReceipt(
            operation=LedgerOperation.DEPOSIT,
            account_id="acct-001",
            amount=Decimal("5"),
            balance=Decimal("10"),
            created_at=datetime(2024, 1, 1),
        )

        assert receipt.counterparty_id is None
        assert receipt.counterparty_balance is None

    def test_event_metadata_default(self) -> None:
        event = Event("e", "account.paid", datetime(2024, 1, 1), "src", "acct-001", {})

        assert event.metadata == {}


class TestEnums:
    """Tests for enumeration values."""

    def test_sort_order_values(self) -> None:
        assert SortOrder("asc") is SortOrder.ASC
        assert SortOrder("desc") is SortOrder.DESC

    def test_unknown_field_policy_values(self) -> None:
        assert {p.value for p in UnknownFieldPolicy} == {"PASS_THROUGH", "REJECT"}

    def test_ledger_operations_are_strings(self) -> None:
        assert LedgerOperation.TRANSFER == "TRANSFER"
