"""PostgreSQL account repository built on psycopg 3."""

import logging
import uuid
from decimal import Decimal
from typing import Any

import psycopg
from psycopg.rows import dict_row

from digital_bank.models import Account

logger = logging.getLogger(__name__)

TABLE_NAME = "bank_accounts"

CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    account_id TEXT PRIMARY KEY,
    owner_name TEXT NOT NULL,
    email TEXT UNIQUE,
    account_number TEXT NOT NULL UNIQUE,
    bank TEXT NOT NULL,
    balance NUMERIC(18, 2) NOT NULL CHECK (balance >= 0),
    password_digest TEXT NOT NULL,
    created_at TIMESTAMP NOT NULL DEFAULT now(),
    updated_at TIMESTAMP
)
"""

_COLUMNS = (
    "account_id, owner_name, email, account_number, bank, balance, "
    "password_digest, created_at, updated_at"
)


def _row_to_account(row: dict[str, Any]) -> Account:
    return Account(
        account_id=row["account_id"],
        owner_name=row["owner_name"],
        account_number=row["account_number"],
        bank=row["bank"],
        balance=Decimal(row["balance"]),
        password_digest=row["password_digest"],
        email=row["email"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresAccountRepository:
    """Account repository over a single autocommit ``AsyncConnection``.

    Each statement commits on its own; the ledger layer provides the
    per-account serialization and transfer compensation.

    Parameters
    ----------
    connection : psycopg.AsyncConnection
        Open connection. Use :meth:`connect` to create one from a
        connection string.
    """

    def __init__(self, connection: psycopg.AsyncConnection) -> None:
        self.connection = connection

    @classmethod
    async def connect(cls, connection_string: str) -> "PostgresAccountRepository":
        """Open an autocommit connection with dict rows."""
        connection = await psycopg.AsyncConnection.connect(
            connection_string, autocommit=True, row_factory=dict_row
        )
        return cls(connection)

    async def close(self) -> None:
        await self.connection.close()

    async def create_tables(self) -> None:
        """Create the accounts table if it does not exist."""
        await self.connection.execute(CREATE_TABLE_SQL)
        logger.info("Ensured table %s", TABLE_NAME)

    async def truncate(self) -> None:
        await self.connection.execute(f"TRUNCATE {TABLE_NAME}")

    async def insert_many(self, accounts: list[Account]) -> int:
        """Bulk insert ready-made accounts (seeding). Returns rows written."""
        async with self.connection.cursor() as cur:
            await cur.executemany(
                f"INSERT INTO {TABLE_NAME} ({_COLUMNS}) "
                "VALUES (%s, %s, %s, %s, %s, %s, %s, COALESCE(%s, now()), %s)",
                [
                    (
                        a.account_id,
                        a.owner_name,
                        a.email,
                        a.account_number,
                        a.bank,
                        a.balance,
                        a.password_digest,
                        a.created_at,
                        a.updated_at,
                    )
                    for a in accounts
                ],
            )
        return len(accounts)

    async def _fetch_one(self, where: str, value: Any) -> Account | None:
        cur = await self.connection.execute(
            f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE {where} = %s", (value,)
        )
        row = await cur.fetchone()
        return _row_to_account(row) if row else None

    async def fetch_all(self) -> list[Account]:
        cur = await self.connection.execute(
            f"SELECT {_COLUMNS} FROM {TABLE_NAME} ORDER BY created_at, account_id"
        )
        return [_row_to_account(row) for row in await cur.fetchall()]

    async def fetch_by_id(self, account_id: str) -> Account | None:
        return await self._fetch_one("account_id", account_id)

    async def fetch_by_account_number(self, account_number: str) -> Account | None:
        return await self._fetch_one("account_number", account_number)

    async def fetch_by_email(self, email: str) -> Account | None:
        return await self._fetch_one("email", email)

    async def create(
        self,
        owner_name: str,
        account_number: str,
        bank: str,
        balance: Decimal,
        password_digest: str,
        email: str | None = None,
    ) -> Account | None:
        try:
            cur = await self.connection.execute(
                f"INSERT INTO {TABLE_NAME} "
                "(account_id, owner_name, email, account_number, bank, balance, password_digest) "
                f"VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING {_COLUMNS}",
                (uuid.uuid4().hex, owner_name, email, account_number, bank, balance, password_digest),
            )
        except psycopg.IntegrityError as exc:
            logger.warning("Account insert rejected: %s", exc)
            return None
        row = await cur.fetchone()
        return _row_to_account(row) if row else None

    async def _execute_write(self, sql: str, params: tuple) -> bool:
        try:
            cur = await self.connection.execute(sql, params)
        except psycopg.IntegrityError as exc:
            logger.warning("Write rejected by constraint: %s", exc)
            return False
        return cur.rowcount == 1

    async def update(
        self, account_id: str, name: str, email: str | None, account_number: str
    ) -> bool:
        return await self._execute_write(
            f"UPDATE {TABLE_NAME} SET owner_name = %s, email = %s, account_number = %s, "
            "updated_at = now() WHERE account_id = %s",
            (name, email, account_number, account_id),
        )

    async def delete(self, account_id: str) -> bool:
        return await self._execute_write(
            f"DELETE FROM {TABLE_NAME} WHERE account_id = %s", (account_id,)
        )

    async def set_password(self, account_id: str, digest: str) -> bool:
        return await self._execute_write(
            f"UPDATE {TABLE_NAME} SET password_digest = %s, updated_at = now() "
            "WHERE account_id = %s",
            (digest, account_id),
        )

    async def set_balance(self, account_id: str, new_balance: Decimal) -> bool:
        return await self._execute_write(
            f"UPDATE {TABLE_NAME} SET balance = %s, updated_at = now() WHERE account_id = %s",
            (new_balance, account_id),
        )
