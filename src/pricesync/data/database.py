"""Async SQLite database manager for price history persistence.

Uses aiosqlite for non-blocking database operations with WAL mode
so the API can read while the scheduler writes.
"""

import os
from typing import Self

import aiosqlite

from pricesync.exceptions import StoreError
from pricesync.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS tracked_assets (
    mint TEXT PRIMARY KEY,
    name TEXT,
    ticker TEXT,
    added_at INTEGER NOT NULL,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS price_history (
    signature TEXT NOT NULL,
    owner TEXT NOT NULL,
    mint TEXT NOT NULL,
    trade_type TEXT NOT NULL,
    pre_token_balance TEXT NOT NULL,
    post_token_balance TEXT NOT NULL,
    pre_sol_balance TEXT NOT NULL,
    post_sol_balance TEXT NOT NULL,
    price TEXT NOT NULL,
    block_time INTEGER NOT NULL,
    PRIMARY KEY (signature, owner)
);

CREATE TABLE IF NOT EXISTS sync_cursors (
    mint TEXT PRIMARY KEY,
    last_signature TEXT,
    last_synced_at INTEGER
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_price_history_mint_time
    ON price_history(mint, block_time);
"""


class PriceHistoryDatabase:
    """Async SQLite connection manager for price history.

    Usage:
        async with PriceHistoryDatabase("/path/to/db") as db:
            await db.db.execute("SELECT ...")
    """

    def __init__(self, db_path: str = "data/price_history.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """Access the raw aiosqlite connection.

        Raises StoreError if not connected.
        """
        if self._connection is None:
            raise StoreError("Database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        """Open database connection, configure pragmas, and create schema."""
        db_dir = os.path.dirname(self._db_path)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        self._connection = await aiosqlite.connect(self._db_path)

        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA synchronous=NORMAL")

        await self._create_tables()
        await self._ensure_schema_version()

        logger.info("price_db_connected", db_path=self._db_path)

    async def close(self) -> None:
        """Close the database connection if open."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info("price_db_closed", db_path=self._db_path)

    async def _create_tables(self) -> None:
        assert self._connection is not None
        await self._connection.executescript(_CREATE_TABLES_SQL)
        await self._connection.executescript(_CREATE_INDEXES_SQL)
        await self._connection.commit()

    async def _ensure_schema_version(self) -> None:
        assert self._connection is not None
        cursor = await self._connection.execute(
            "SELECT version FROM schema_version LIMIT 1"
        )
        row = await cursor.fetchone()
        if row is None:
            await self._connection.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            await self._connection.commit()
            logger.info("schema_version_set", version=SCHEMA_VERSION)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
