"""Tests for account search, sort and pagination."""

import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from digital_bank.config import QueryConfig
from digital_bank.exceptions import InvalidArgumentError
from digital_bank.models import AccountDetail, AccountSummary, SortOrder, UnknownFieldPolicy
from digital_bank.services.query import (
    AccountQueryEngine,
    SearchSpec,
    SortSpec,
    parse_search,
    parse_sort,
    total_pages,
)


def names(accounts) -> list[str]:
    return [a.owner_name for a in accounts]


class TestParsing:
    """Tests for search and sort string parsing."""

    def test_parse_search(self) -> None:
        assert parse_search("ownerName:ann") == SearchSpec("ownerName", "ann")

    def test_parse_search_splits_on_first_colon(self) -> None:
        assert parse_search("email:a:b") == SearchSpec("email", "a:b")

    def test_parse_search_without_value(self) -> None:
        assert parse_search("email") == SearchSpec("email", "")

    def test_parse_search_empty(self) -> None:
        assert parse_search(None) is None
        assert parse_search("") is None

    def test_parse_search_passes_spec_through(self) -> None:
        spec = SearchSpec("email", "x")
        assert parse_search(spec) is spec

    @pytest.mark.parametrize(
        "sort,expected",
        [
            ("balance:asc", SortOrder.ASC),
            ("balance:ASC", SortOrder.ASC),
            ("balance", SortOrder.ASC),
            ("balance:", SortOrder.ASC),
            ("balance:desc", SortOrder.DESC),
            ("balance:down", SortOrder.DESC),
        ],
    )
    def test_parse_sort_direction(self, sort, expected) -> None:
        spec = parse_sort(sort)
        assert spec.field == "balance"
        assert spec.order == expected

    def test_parse_sort_default(self) -> None:
        assert parse_sort(None) == SortSpec("ownerName", SortOrder.ASC)
        assert parse_sort("", default="balance:desc") == SortSpec("balance", SortOrder.DESC)

    @pytest.mark.parametrize(
        "count,size,expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 10, 3)],
    )
    def test_total_pages(self, count, size, expected) -> None:
        assert total_pages(count, size) == expected


class TestFilter:
    """Tests for search filtering."""

    def test_case_insensitive_substring(self, repository, make_account) -> None:
        accounts = [
            make_account(owner_name="Joanne"),
            make_account(owner_name="ANN Lee"),
            make_account(owner_name="Hannah"),
            make_account(owner_name="Bob"),
        ]
        engine = AccountQueryEngine(repository)

        result = engine.filter_accounts(accounts, "ownerName:ann")

        assert names(result) == ["Joanne", "ANN Lee", "Hannah"]

    def test_snake_case_field(self, repository, make_account) -> None:
        accounts = [make_account(owner_name="Ann"), make_account(owner_name="Bob")]
        engine = AccountQueryEngine(repository)

        assert names(engine.filter_accounts(accounts, "owner_name:BO")) == ["Bob"]

    def test_filter_by_email(self, repository, make_account) -> None:
        accounts = [
            make_account(owner_name="A", email="alpha@bank.test"),
            make_account(owner_name="B", email="beta@mail.test"),
            make_account(owner_name="C", email=""),
        ]
        engine = AccountQueryEngine(repository)

        assert names(engine.filter_accounts(accounts, "email:BANK")) == ["A"]

    def test_empty_value_matches_everything(self, repository, make_account) -> None:
        accounts = [make_account(owner_name="A"), make_account(owner_name="B")]
        engine = AccountQueryEngine(repository)

        assert len(engine.filter_accounts(accounts, "ownerName:")) == 2

    def test_unknown_field_passes_through(self, repository, make_account) -> None:
        accounts = [make_account(owner_name="A"), make_account(owner_name="B")]
        engine = AccountQueryEngine(repository)

        assert names(engine.filter_accounts(accounts, "nickname:zzz")) == ["A", "B"]

    def test_unknown_field_rejected(self, repository, make_account) -> None:
        engine = AccountQueryEngine(
            repository, QueryConfig(unknown_field_policy=UnknownFieldPolicy.REJECT)
        )

        with pytest.raises(InvalidArgumentError):
            engine.filter_accounts([make_account()], "nickname:zzz")

    def test_no_match(self, repository, make_account) -> None:
        engine = AccountQueryEngine(repository)

        assert engine.filter_accounts([make_account(owner_name="A")], "ownerName:zzz") == []


class TestSort:
    """Tests for sorting."""

    def _accounts(self, make_account):
        return [
            make_account(owner_name="a", balance="10"),
            make_account(owner_name="b", balance="5"),
            make_account(owner_name="c", balance="10"),
            make_account(owner_name="d", balance="5"),
        ]

    def test_descending_is_stable(self, repository, make_account) -> None:
        engine = AccountQueryEngine(repository)

        result = engine.sort_accounts(self._accounts(make_account), "balance:desc")

        assert names(result) == ["a", "c", "b", "d"]

    def test_ascending_is_stable(self, repository, make_account) -> None:
        engine = AccountQueryEngine(repository)

        result = engine.sort_accounts(self._accounts(make_account), "balance:asc")

        assert names(result) == ["b", "d", "a", "c"]

    def test_any_other_direction_is_descending(self, repository, make_account) -> None:
        engine = AccountQueryEngine(repository)

        result = engine.sort_accounts(self._accounts(make_account), "balance:sideways")

        assert names(result) == ["a", "c", "b", "d"]

    def test_balance_sorts_numerically(self, repository, make_account) -> None:
        accounts = [
            make_account(owner_name="nine", balance="9"),
            make_account(owner_name="ten", balance="10"),
            make_account(owner_name="hundred", balance="100"),
        ]
        engine = AccountQueryEngine(repository)

        assert names(engine.sort_accounts(accounts, "balance")) == ["nine", "ten", "hundred"]

    def test_default_sort_is_owner_name(self, repository, make_account) -> None:
        accounts = [make_account(owner_name="Zed"), make_account(owner_name="Amy")]
        engine = AccountQueryEngine(repository)

        assert names(engine.sort_accounts(accounts, None)) == ["Amy", "Zed"]

    def test_missing_values_sort_first(self, repository, make_account) -> None:
        accounts = [
            make_account(owner_name="with", email="x@test.com"),
            replace(make_account(owner_name="without"), email=None),
        ]
        engine = AccountQueryEngine(repository)

        assert names(engine.sort_accounts(accounts, "email:asc")) == ["without", "with"]

    def test_unknown_field_keeps_order(self, repository, make_account) -> None:
        accounts = self._accounts(make_account)
        engine = AccountQueryEngine(repository)

        assert names(engine.sort_accounts(accounts, "shoeSize:desc")) == ["a", "b", "c", "d"]

    def test_unknown_field_rejected(self, repository, make_account) -> None:
        engine = AccountQueryEngine(
            repository, QueryConfig(unknown_field_policy=UnknownFieldPolicy.REJECT)
        )

        with pytest.raises(InvalidArgumentError):
            engine.sort_accounts(self._accounts(make_account), "shoeSize:desc")


class TestPagination:
    """Tests for both listing modes."""

    @pytest.fixture
    def engine(self, repository, make_account) -> AccountQueryEngine:
        for i in range(25):
            repository.add_account(make_account(owner_name=f"Ann {i:02d}", balance=i))
        for i in range(5):
            repository.add_account(make_account(owner_name=f"Bob {i}", balance=i))
        return AccountQueryEngine(repository)

    def test_sliced_pages(self, engine) -> None:
        pages = [
            asyncio.run(engine.list_page("ownerName:ann", "ownerName:asc", n, 10))
            for n in (1, 2, 3, 4)
        ]

        assert [len(p) for p in pages] == [10, 10, 5, 0]
        assert pages[0][0].owner_name == "Ann 00"
        assert pages[2][-1].owner_name == "Ann 24"
        assert all(isinstance(row, AccountDetail) for row in pages[0])

    def test_sliced_pages_cover_selection_once(self, engine) -> None:
        seen = []
        for n in (1, 2, 3):
            seen.extend(
                row.id for row in asyncio.run(engine.list_page("ownerName:ann", None, n, 10))
            )

        assert len(seen) == 25
        assert len(set(seen)) == 25

    def test_page_summary_first_page(self, engine) -> None:
        summary = asyncio.run(engine.list_page_summary("ownerName:ann", "balance:desc", 1, 10))

        assert summary.total_pages == 3
        assert summary.has_previous_pages is False
        assert summary.has_next_pages is True
        assert len(summary.results) == 25
        assert summary.results[0].balance == Decimal("24")
        assert all(isinstance(row, AccountSummary) for row in summary.results)

    def test_page_summary_last_page(self, engine) -> None:
        summary = asyncio.run(engine.list_page_summary("ownerName:ann", None, 3, 10))

        assert summary.has_previous_pages is True
        assert summary.has_next_pages is False

    def test_page_summary_filters_on_email(self, repository, make_account) -> None:
        repository.add_account(make_account(owner_name="A", email="ann@x.test"))
        repository.add_account(make_account(owner_name="B", email="bob@x.test"))
        engine = AccountQueryEngine(repository)

        summary = asyncio.run(engine.list_page_summary("email:ann", None, 1, 10))

        assert [row.owner_name for row in summary.results] == ["A"]

    def test_empty_result(self, engine) -> None:
        summary = asyncio.run(engine.list_page_summary("ownerName:zzz", None, 1, 10))

        assert summary.results == []
        assert summary.total_pages == 0
        assert summary.has_previous_pages is False
        assert summary.has_next_pages is False

    def test_no_search_returns_everything(self, engine) -> None:
        summary = asyncio.run(engine.list_page_summary(None, None, 1, 10))

        assert len(summary.results) == 30
        assert summary.total_pages == 3

    @pytest.mark.parametrize("page_number,page_size", [(1, 0), (1, -5), (0, 10), (-1, 10)])
    def test_invalid_paging(self, engine, page_number, page_size) -> None:
        with pytest.raises(InvalidArgumentError):
            asyncio.run(engine.list_page(None, None, page_number, page_size))
        with pytest.raises(InvalidArgumentError):
            asyncio.run(engine.list_page_summary(None, None, page_number, page_size))

    def test_listing_does_not_write(self, engine, repository) -> None:
        before = dict(repository.accounts)

        asyncio.run(engine.list_page_summary("ownerName:ann", "balance:desc", 1, 10))

        assert repository.accounts == before
