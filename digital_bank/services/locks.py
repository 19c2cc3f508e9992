"""Per-account mutual exclusion for balance read-modify-write sequences.

Usage::

    locks = AccountLockManager()

    async with locks.hold(account_id):
        account = await repository.fetch_by_id(account_id)
        await repository.set_balance(account_id, account.balance + amount)

    # Several accounts: always acquired in sorted id order
    async with locks.hold(source_id, target_id):
        ...

Locks live only in this process. Every service that mutates accounts of
one repository must share a single manager.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class AccountLockManager:
    """Registry of ``asyncio.Lock`` objects keyed by account id.

    A lock is created on first use and dropped once no coroutine holds
    or waits for it.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def _checkout(self, account_id: str) -> asyncio.Lock:
        self._users[account_id] = self._users.get(account_id, 0) + 1
        return self._locks.setdefault(account_id, asyncio.Lock())

    def _checkin(self, account_id: str) -> None:
        remaining = self._users[account_id] - 1
        if remaining:
            self._users[account_id] = remaining
        else:
            del self._users[account_id]
            del self._locks[account_id]

    @asynccontextmanager
    async def hold(self, *account_ids: str) -> AsyncIterator[None]:
        """Hold the locks of every given account for the block.

        Ids are de-duplicated and acquired in sorted order so two
        coroutines locking the same pair never deadlock.
        """
        ordered = sorted(set(account_ids))
        locks = [self._checkout(account_id) for account_id in ordered]
        acquired: list[asyncio.Lock] = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for account_id in ordered:
                self._checkin(account_id)

    def is_locked(self, account_id: str) -> bool:
        lock = self._locks.get(account_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)
