"""Account listing: search, sort and pagination over a repository snapshot.

Search and sort arrive as ``field:value`` strings, the way the transport
layer receives them (``ownerName:ann``, ``balance:desc``). Field names are
accepted in camelCase or snake_case.

Unknown fields are not an error by default: an unknown search field
matches every account and an unknown sort field keeps repository order.
Set ``QueryConfig.unknown_field_policy`` to ``REJECT`` to turn both into
:class:`~digital_bank.exceptions.InvalidArgumentError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from digital_bank.config import QueryConfig
from digital_bank.exceptions import InvalidArgumentError
from digital_bank.models import (
    Account,
    AccountDetail,
    AccountSummary,
    PageSummary,
    SortOrder,
    UnknownFieldPolicy,
)
from digital_bank.repository import AccountRepository

logger = logging.getLogger(__name__)

SEARCH_FIELDS = {
    "ownerName": "owner_name",
    "owner_name": "owner_name",
    "email": "email",
}

SORT_FIELDS = {
    "id": "account_id",
    "account_id": "account_id",
    "ownerName": "owner_name",
    "owner_name": "owner_name",
    "email": "email",
    "accountNumber": "account_number",
    "account_number": "account_number",
    "bank": "bank",
    "balance": "balance",
    "createdAt": "created_at",
    "created_at": "created_at",
}


@dataclass(frozen=True)
class SearchSpec:
    """Case-insensitive substring match of ``value`` against ``field``."""

    field: str
    value: str = ""


@dataclass(frozen=True)
class SortSpec:
    field: str
    order: SortOrder = SortOrder.ASC


def parse_search(search: str | SearchSpec | None) -> SearchSpec | None:
    """Parse ``"field:value"``. Only the first colon separates."""
    if search is None or isinstance(search, SearchSpec):
        return search
    if not search:
        return None
    field_name, _, value = search.partition(":")
    return SearchSpec(field=field_name.strip(), value=value)


def parse_sort(sort: str | SortSpec | None, default: str = "ownerName:asc") -> SortSpec:
    """Parse ``"field:order"``.

    An omitted order or ``asc`` sorts ascending; any other explicit order
    sorts descending.
    """
    if isinstance(sort, SortSpec):
        return sort
    field_name, _, order = (sort or default).partition(":")
    order = order.strip().lower()
    direction = SortOrder.ASC if order in ("", SortOrder.ASC.value) else SortOrder.DESC
    return SortSpec(field=field_name.strip(), order=direction)


def _validate_paging(page_number: int, page_size: int) -> None:
    if page_size <= 0:
        raise InvalidArgumentError(f"page_size must be positive, got {page_size}")
    if page_number < 1:
        raise InvalidArgumentError(f"page_number must be at least 1, got {page_number}")


def total_pages(count: int, page_size: int) -> int:
    """Ceiling division of ``count`` by ``page_size``."""
    return -(-count // page_size)


def _sort_key(attribute: str):
    def key(account: Account) -> tuple[bool, Any]:
        value = getattr(account, attribute)
        # Missing values order before present ones
        return (value is not None, value)

    return key


class AccountQueryEngine:
    """Filter, sort and paginate accounts.

    Each listing call takes exactly one ``fetch_all()`` snapshot and works
    on it in memory; nothing is written back.

    Parameters
    ----------
    repository : AccountRepository
        Source of the snapshot.
    config : QueryConfig | None
        Unknown-field policy and default sort.
    """

    def __init__(self, repository: AccountRepository, config: QueryConfig | None = None) -> None:
        self.repository = repository
        self.config = config if config is not None else QueryConfig()

    def _resolve(self, mapping: dict[str, str], field_name: str, kind: str) -> str | None:
        attribute = mapping.get(field_name)
        if attribute is None:
            if self.config.unknown_field_policy == UnknownFieldPolicy.REJECT:
                raise InvalidArgumentError(f"Unknown {kind} field: {field_name!r}")
            logger.debug("Unknown %s field %r ignored", kind, field_name)
        return attribute

    def filter_accounts(
        self, accounts: Sequence[Account], search: str | SearchSpec | None
    ) -> list[Account]:
        """Return the accounts matching ``search``, preserving input order."""
        spec = parse_search(search)
        if spec is None:
            return list(accounts)

        attribute = self._resolve(SEARCH_FIELDS, spec.field, "search")
        if attribute is None:
            return list(accounts)

        needle = spec.value.lower()
        return [
            account
            for account in accounts
            if needle in (getattr(account, attribute) or "").lower()
        ]

    def sort_accounts(
        self, accounts: Sequence[Account], sort: str | SortSpec | None
    ) -> list[Account]:
        """Stable sort in either direction; ties keep input order."""
        spec = parse_sort(sort, self.config.default_sort)
        attribute = self._resolve(SORT_FIELDS, spec.field, "sort")
        if attribute is None:
            return list(accounts)
        # sorted() stays stable with reverse=True
        return sorted(accounts, key=_sort_key(attribute), reverse=spec.order == SortOrder.DESC)

    async def _select(
        self, search: str | SearchSpec | None, sort: str | SortSpec | None
    ) -> list[Account]:
        snapshot = await self.repository.fetch_all()
        return self.sort_accounts(self.filter_accounts(snapshot, search), sort)

    async def list_page_summary(
        self,
        search: str | SearchSpec | None = None,
        sort: str | SortSpec | None = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> PageSummary:
        """Return every matching account with pagination metadata.

        The results are not sliced; ``total_pages``, ``has_previous_pages``
        and ``has_next_pages`` describe ``page_number`` within them.
        """
        _validate_paging(page_number, page_size)
        selected = await self._select(search, sort)
        pages = total_pages(len(selected), page_size)
        return PageSummary(
            results=[AccountSummary.from_account(a) for a in selected],
            total_pages=pages,
            has_previous_pages=page_number > 1,
            has_next_pages=page_number < pages,
        )

    async def list_page(
        self,
        search: str | SearchSpec | None = None,
        sort: str | SortSpec | None = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> list[AccountDetail]:
        """Return only the accounts on ``page_number``."""
        _validate_paging(page_number, page_size)
        selected = await self._select(search, sort)
        start = (page_number - 1) * page_size
        return [AccountDetail.from_account(a) for a in selected[start : start + page_size]]
