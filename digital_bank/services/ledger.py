"""Balance-mutating operations: deposit, payment and transfer.

Every operation runs Validate -> Compute -> Persist while holding the lock
of each account it touches, so two operations on the same account never
interleave their read and write. Balances are always re-read after the
lock is taken.

A transfer writes the debit first and the credit second. When the credit
does not commit, the source balance is written back before the error is
raised, and a cancelled transfer is rolled back the same way, so callers
only ever observe the state before or after the whole transfer.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Awaitable, TypeVar

from digital_bank.config import LedgerConfig
from digital_bank.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidArgumentError,
    PartialTransferError,
    PersistenceError,
    SinkError,
)
from digital_bank.logging import ledger_fields
from digital_bank.models import Account, Event, LedgerOperation, LedgerReceipt
from digital_bank.repository import AccountRepository
from digital_bank.services.locks import AccountLockManager
from digital_bank.sinks import EventSink

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_amount(value: Any, *, allow_zero: bool = False) -> Decimal:
    """Convert ``value`` to a finite ``Decimal`` greater than zero.

    Parameters
    ----------
    value : Decimal | int | str | float
        Floats go through ``str`` so ``0.1`` stays ``Decimal("0.1")``.
    allow_zero : bool
        Accept zero (opening balances).

    Raises
    ------
    InvalidArgumentError
        Not numeric, not finite, negative, or zero when not allowed.
    """
    if isinstance(value, bool) or not isinstance(value, (Decimal, int, float, str)):
        raise InvalidArgumentError(f"Amount must be numeric, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidArgumentError(f"Amount must be numeric, got {value!r}") from exc
    if not amount.is_finite():
        raise InvalidArgumentError(f"Amount must be finite, got {value!r}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidArgumentError(f"Amount must be positive, got {value!r}")
    return amount


class LedgerService:
    """Deposit, payment and transfer against an account repository.

    Parameters
    ----------
    repository : AccountRepository
        System of record; ``set_balance`` is the only write used.
    locks : AccountLockManager | None
        Share one manager with every other service writing to the same
        repository.
    config : LedgerConfig | None
        Repository timeout and event naming.
    sink : EventSink | None
        Receives an event for each committed operation.
    """

    #: Re-reads attempted before the outcome of a failed write counts as unknown
    REREAD_ATTEMPTS = 3

    def __init__(
        self,
        repository: AccountRepository,
        locks: AccountLockManager | None = None,
        config: LedgerConfig | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.repository = repository
        self.locks = locks if locks is not None else AccountLockManager()
        self.config = config if config is not None else LedgerConfig()
        self.sink = sink

    # ------------------------------------------------------------------
    # Repository access
    # ------------------------------------------------------------------

    async def _call(self, awaitable: Awaitable[T]) -> T:
        timeout = self.config.repository_timeout
        if timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout)

    async def _load(self, account_id: str) -> Account:
        try:
            account = await self._call(self.repository.fetch_by_id(account_id))
        except asyncio.TimeoutError as exc:
            raise PersistenceError(f"Timed out reading account {account_id}") from exc
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def _write_balance(self, account_id: str, new_balance: Decimal) -> None:
        try:
            ok = await self._call(self.repository.set_balance(account_id, new_balance))
        except asyncio.TimeoutError as exc:
            logger.error("Balance write timed out for account %s", account_id)
            raise PersistenceError(f"Timed out writing balance of account {account_id}") from exc
        except Exception as exc:
            logger.error("Balance write raised for account %s: %s", account_id, exc)
            raise PersistenceError(f"Balance write failed for account {account_id}: {exc}") from exc
        if not ok:
            logger.error("Balance write rejected for account %s", account_id)
            raise PersistenceError(f"Balance write rejected for account {account_id}")

    async def _landed(self, account_id: str, expected: Decimal) -> bool | None:
        """Re-read an account after an uncertain write.

        Returns
        -------
        bool | None
            True when the balance equals ``expected``, False when it does
            not, None when no re-read succeeded and the outcome is unknown.
        """
        for attempt in range(1, self.REREAD_ATTEMPTS + 1):
            try:
                account = await self._call(self.repository.fetch_by_id(account_id))
            except Exception as exc:
                logger.warning(
                    "Re-read %d/%d of account %s failed: %s",
                    attempt, self.REREAD_ATTEMPTS, account_id, exc,
                )
                continue
            if account is None:
                logger.error("Account %s vanished while its lock was held", account_id)
                return None
            return account.balance == expected
        return None

    async def _undo_write(self, account: Account, applied_balance: Decimal) -> bool:
        """Put ``account`` back to its snapshot balance if a failed write landed.

        Returns True when the account is known to hold its snapshot balance.
        """
        landed = await self._landed(account.account_id, applied_balance)
        if landed is False:
            return True
        if landed is None:
            logger.critical(
                "Balance of account %s is unknown after a failed write; expected %s",
                account.account_id, account.balance,
            )
            return False
        try:
            await self._write_balance(account.account_id, account.balance)
        except PersistenceError:
            logger.critical(
                "Write to account %s landed but could not be undone; balance is %s, expected %s",
                account.account_id, applied_balance, account.balance,
            )
            return False
        logger.warning("Undid uncertain write to account %s", account.account_id)
        return True

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _publish(self, event_type: str, subject: str, data: dict[str, Any]) -> None:
        if self.sink is None:
            return
        event = Event(
            event_id=uuid.uuid4().hex,
            event_type=event_type,
            event_time=datetime.now(),
            source=self.config.event_source,
            subject=subject,
            data=data,
        )
        try:
            self.sink.publish(event)
        except SinkError:
            # The balance change is already committed; the event is not.
            logger.exception("Failed to publish %s for account %s", event_type, subject)

    def _commit(self, receipt: LedgerReceipt, event_type: str) -> LedgerReceipt:
        logger.info(
            "%s of %s on account %s committed",
            receipt.operation.value.capitalize(), receipt.amount, receipt.account_id,
            extra=ledger_fields(
                receipt.operation,
                receipt.account_id,
                receipt.amount,
                balance=receipt.balance,
                counterparty_id=receipt.counterparty_id,
            ),
        )
        self._publish(event_type, receipt.account_id, asdict(receipt))
        return receipt

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def _apply(self, account: Account, new_balance: Decimal) -> None:
        """Write one account's new balance, settling uncertain outcomes.

        A write that raised or timed out but actually landed counts as
        success. One that did not land raises. A cancelled write is undone.
        """
        try:
            await self._write_balance(account.account_id, new_balance)
        except PersistenceError:
            landed = await asyncio.shield(self._landed(account.account_id, new_balance))
            if landed:
                logger.warning(
                    "Write to account %s reported failure but was applied", account.account_id
                )
                return
            if landed is None:
                logger.critical(
                    "Balance of account %s is unknown after a failed write; expected %s",
                    account.account_id, account.balance,
                )
            raise
        except asyncio.CancelledError:
            await asyncio.shield(self._undo_write(account, new_balance))
            raise

    async def deposit(self, account_id: str, amount: Decimal | int | str) -> LedgerReceipt:
        """Add ``amount`` to an account's balance.

        Raises
        ------
        InvalidArgumentError
            ``amount`` is not a positive number.
        AccountNotFoundError
            No such account.
        PersistenceError
            The balance write did not succeed.
        """
        amount = parse_amount(amount)
        async with self.locks.hold(account_id):
            account = await self._load(account_id)
            new_balance = account.balance + amount
            await self._apply(account, new_balance)

        receipt = LedgerReceipt(
            operation=LedgerOperation.DEPOSIT,
            account_id=account_id,
            amount=amount,
            balance=new_balance,
            created_at=datetime.now(),
        )
        return self._commit(receipt, "account.deposited")

    async def payment(self, account_id: str, amount: Decimal | int | str) -> LedgerReceipt:
        """Withdraw ``amount`` from an account.

        Raises
        ------
        InvalidArgumentError
            ``amount`` is not a positive number.
        AccountNotFoundError
            No such account.
        InsufficientFundsError
            The balance is lower than ``amount``; nothing is written.
        PersistenceError
            The balance write did not succeed.
        """
        amount = parse_amount(amount)
        async with self.locks.hold(account_id):
            account = await self._load(account_id)
            if account.balance < amount:
                logger.warning(
                    "Payment of %s refused for account %s: balance %s",
                    amount, account_id, account.balance,
                    extra=ledger_fields(
                        LedgerOperation.PAYMENT, account_id, amount, balance=account.balance
                    ),
                )
                raise InsufficientFundsError(
                    f"Account {account_id} balance {account.balance} is below {amount}"
                )
            new_balance = account.balance - amount
            await self._apply(account, new_balance)

        receipt = LedgerReceipt(
            operation=LedgerOperation.PAYMENT,
            account_id=account_id,
            amount=amount,
            balance=new_balance,
            created_at=datetime.now(),
        )
        return self._commit(receipt, "account.paid")

    async def transfer(
        self, source_id: str, target_id: str, amount: Decimal | int | str
    ) -> LedgerReceipt:
        """Move ``amount`` from ``source_id`` to ``target_id``.

        Raises
        ------
        InvalidArgumentError
            ``amount`` is not positive, or source and target are the same.
        AccountNotFoundError
            Either account is missing.
        InsufficientFundsError
            The source balance is lower than ``amount``.
        PersistenceError
            The debit did not commit; neither balance changed.
        PartialTransferError
            The debit committed but the credit did not, or the outcome of
            a write could not be determined. ``compensated`` says whether
            the source balance was restored.
        """
        amount = parse_amount(amount)
        if source_id == target_id:
            raise InvalidArgumentError("Source and target accounts must differ")

        async with self.locks.hold(source_id, target_id):
            source = await self._load(source_id)
            target = await self._load(target_id)
            if source.balance < amount:
                logger.warning(
                    "Transfer of %s refused from account %s: balance %s",
                    amount, source_id, source.balance,
                    extra=ledger_fields(
                        LedgerOperation.TRANSFER, source_id, amount,
                        balance=source.balance, counterparty_id=target_id,
                    ),
                )
                raise InsufficientFundsError(
                    f"Account {source_id} balance {source.balance} is below {amount}"
                )

            source_new = source.balance - amount
            target_new = target.balance + amount

            try:
                await self._write_balance(source_id, source_new)
            except PersistenceError as exc:
                # A write that raised or timed out may still have landed
                if not await asyncio.shield(self._undo_write(source, source_new)):
                    self._report_unbalanced(source, target_id, amount)
                    raise PartialTransferError(
                        f"Debit of account {source_id} failed and its outcome is unresolved",
                        compensated=False,
                    ) from exc
                raise
            except asyncio.CancelledError:
                await asyncio.shield(self._undo_write(source, source_new))
                raise

            try:
                await self._write_balance(target_id, target_new)
            except PersistenceError as exc:
                landed = await asyncio.shield(self._landed(target_id, target_new))
                if landed is None:
                    # Restoring the source now could duplicate a credit that landed
                    self._report_unbalanced(source, target_id, amount)
                    raise PartialTransferError(
                        f"Credit of {amount} to account {target_id} has an unknown outcome",
                        compensated=False,
                    ) from exc
                if not landed:
                    compensated = await asyncio.shield(self._compensate(source, target_id, amount))
                    raise PartialTransferError(
                        f"Credit of {amount} to account {target_id} failed after debiting "
                        f"account {source_id}",
                        compensated=compensated,
                    ) from exc
                logger.warning("Credit to account %s reported failure but was applied", target_id)
            except asyncio.CancelledError:
                landed = await asyncio.shield(self._landed(target_id, target_new))
                if landed is None:
                    self._report_unbalanced(source, target_id, amount)
                elif not landed:
                    await asyncio.shield(self._compensate(source, target_id, amount))
                raise

        receipt = LedgerReceipt(
            operation=LedgerOperation.TRANSFER,
            account_id=source_id,
            amount=amount,
            balance=source_new,
            created_at=datetime.now(),
            counterparty_id=target_id,
            counterparty_balance=target_new,
        )
        return self._commit(receipt, "account.transferred")

    async def _compensate(self, source: Account, target_id: str, amount: Decimal) -> bool:
        """Write the source's pre-transfer balance back. True on success."""
        try:
            await self._write_balance(source.account_id, source.balance)
        except PersistenceError:
            self._report_unbalanced(source, target_id, amount)
            return False
        logger.warning(
            "Compensated account %s for failed credit of %s to %s",
            source.account_id, amount, target_id,
            extra=ledger_fields(
                LedgerOperation.TRANSFER, source.account_id, amount,
                balance=source.balance, counterparty_id=target_id,
            ),
        )
        return True

    def _report_unbalanced(self, source: Account, target_id: str, amount: Decimal) -> None:
        """Flag a transfer whose debit may stand without its credit."""
        logger.critical(
            "Compensation failed: account %s may be debited %s with no credit to %s",
            source.account_id, amount, target_id,
            extra=ledger_fields(
                LedgerOperation.TRANSFER, source.account_id, amount,
                expected_balance=source.balance, counterparty_id=target_id,
            ),
        )
        self._publish(
            "transfer.compensation_failed",
            source.account_id,
            {"target_id": target_id, "amount": amount, "expected_balance": source.balance},
        )
