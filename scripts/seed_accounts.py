#!/usr/bin/env python3
"""Generate synthetic bank accounts and load them into PostgreSQL.

Without ``--postgres-url`` the accounts are written as JSON to stdout
(or to ``--output`` when given), which is handy for fixtures and demos.
"""

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

from digital_bank.generators import AccountGenerator
from digital_bank.logging import LOG_FORMATS, setup_logging
from digital_bank.repository.postgres import PostgresAccountRepository
from digital_bank.security import Argon2PasswordHasher
from digital_bank.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


async def load_to_postgres(accounts: list, connection_string: str, truncate: bool = False) -> None:
    """Create the accounts table and bulk insert ``accounts``."""
    repository = await PostgresAccountRepository.connect(connection_string)
    try:
        await repository.create_tables()
        if truncate:
            await repository.truncate()
        t0 = time.perf_counter()
        count = await repository.insert_many(accounts)
        elapsed = time.perf_counter() - t0
        logger.info(
            "PostgreSQL load complete: %d rows in %.1fs (%.0f rows/sec)",
            count, elapsed, count / max(elapsed, 0.001),
        )
    finally:
        await repository.close()


def write_json(accounts: list, output: Path | None) -> None:
    data = [to_dict(account) for account in accounts]
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output is None:
        print(text)
    else:
        output.write_text(text, encoding="utf-8")
        logger.info("Wrote %d accounts to %s", len(accounts), output)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed synthetic bank accounts")
    parser.add_argument("--accounts", type=int, default=25, help="Number of accounts to generate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument(
        "--password",
        type=str,
        default=None,
        help="Plaintext password hashed into every account (default: accounts cannot log in)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="Load into this PostgreSQL database instead of printing JSON",
    )
    parser.add_argument(
        "--truncate",
        action="store_true",
        help="Truncate the accounts table before loading",
    )
    parser.add_argument("--output", type=Path, default=None, help="Write JSON to this file")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--log-format", choices=LOG_FORMATS, default="standard")
    args = parser.parse_args()

    if args.accounts <= 0:
        parser.error("--accounts must be positive")

    setup_logging(args.log_level, args.log_format)

    hasher = Argon2PasswordHasher() if args.password else None
    generator = AccountGenerator(seed=args.seed, hasher=hasher)
    accounts = list(generator.generate_batch(args.accounts, password=args.password or ""))
    logger.info("Generated %d accounts", len(accounts))

    if args.postgres_url:
        try:
            asyncio.run(load_to_postgres(accounts, args.postgres_url, truncate=args.truncate))
        except KeyboardInterrupt:
            sys.exit(130)
    else:
        write_json(accounts, args.output)


if __name__ == "__main__":
    main()
