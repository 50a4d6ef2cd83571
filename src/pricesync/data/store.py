"""Typed SQLite read/write abstraction for price history.

Provides PriceHistoryStore with typed methods for tracked assets, priced
trades and sync cursors. All SQL is isolated behind this interface.

CRITICAL: All balances and prices stored as TEXT in SQLite, restored as Decimal on read.
"""

import time
from collections import defaultdict
from decimal import Decimal, InvalidOperation

from pricesync.data.database import PriceHistoryDatabase
from pricesync.logging import get_logger
from pricesync.models import HistoricPrice, PricedTrade, TradeType

logger = get_logger(__name__)


class PriceHistoryStore:
    """Async SQLite store for tracked assets, priced trades and cursors.

    Usage:
        async with PriceHistoryDatabase("data/price_history.db") as database:
            store = PriceHistoryStore(database)
            await store.insert_trades(trades)
    """

    def __init__(self, database: PriceHistoryDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods
    # ──────────────────────────────────────────────

    async def add_asset(
        self,
        mint: str,
        name: str | None = None,
        ticker: str | None = None,
        is_active: bool = True,
    ) -> None:
        """Track a mint, preserving the original added_at timestamp."""
        now_ms = int(time.time() * 1000)
        await self._database.db.execute(
            "INSERT OR REPLACE INTO tracked_assets "
            "(mint, name, ticker, added_at, is_active) "
            "VALUES (?, ?, ?, COALESCE((SELECT added_at FROM tracked_assets WHERE mint = ?), ?), ?)",
            (mint, name, ticker, mint, now_ms, 1 if is_active else 0),
        )
        await self._database.db.commit()
        logger.info("asset_tracked", mint=mint, active=is_active)

    async def insert_trades(self, trades: list[PricedTrade]) -> int:
        """Insert priced trades, ignoring duplicates via INSERT OR IGNORE.

        A trade is identified by (signature, owner), so re-running a sync over
        the same history does not create duplicate rows.
        Returns the number of actually inserted rows.
        """
        if not trades:
            return 0

        data = [
            (
                t.signature,
                t.owner,
                t.mint,
                t.type.value,
                str(t.pre_token_balance),
                str(t.post_token_balance),
                str(t.pre_sol_balance),
                str(t.post_sol_balance),
                str(t.price),
                t.date,
            )
            for t in trades
        ]

        cursor = await self._database.db.executemany(
            "INSERT OR IGNORE INTO price_history "
            "(signature, owner, mint, trade_type, pre_token_balance, post_token_balance, "
            "pre_sol_balance, post_sol_balance, price, block_time) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            data,
        )
        await self._database.db.commit()

        inserted = cursor.rowcount
        logger.debug("inserted_trades", total=len(trades), inserted=inserted)
        return inserted

    async def update_cursor(self, mint: str, last_signature: str) -> None:
        """Record the newest processed signature for a mint."""
        now_ms = int(time.time() * 1000)
        await self._database.db.execute(
            "INSERT OR REPLACE INTO sync_cursors (mint, last_signature, last_synced_at) "
            "VALUES (?, ?, ?)",
            (mint, last_signature, now_ms),
        )
        await self._database.db.commit()

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def get_assets(self, active_only: bool = True) -> list[dict]:
        """Tracked assets as dicts with mint, name, ticker, added_at, is_active."""
        query = "SELECT mint, name, ticker, added_at, is_active FROM tracked_assets"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY added_at ASC"

        cursor = await self._database.db.execute(query)
        rows = await cursor.fetchall()
        return [
            {
                "mint": row[0],
                "name": row[1],
                "ticker": row[2],
                "added_at": row[3],
                "is_active": bool(row[4]),
            }
            for row in rows
        ]

    async def get_cursor(self, mint: str) -> str | None:
        """Newest processed signature for a mint, or None before the first sync."""
        cursor = await self._database.db.execute(
            "SELECT last_signature FROM sync_cursors WHERE mint = ?", (mint,)
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def get_trades(self, mint: str, limit: int = 1000) -> list[PricedTrade]:
        """Latest ``limit`` trades for a mint, newest first."""
        cursor = await self._database.db.execute(
            "SELECT signature, mint, trade_type, owner, pre_token_balance, "
            "post_token_balance, pre_sol_balance, post_sol_balance, price, block_time "
            "FROM price_history WHERE mint = ? "
            "ORDER BY block_time DESC, signature ASC, owner ASC LIMIT ?",
            (mint, limit),
        )
        rows = await cursor.fetchall()
        return [
            PricedTrade(
                signature=row[0],
                mint=row[1],
                type=TradeType(row[2]),
                owner=row[3],
                pre_token_balance=Decimal(row[4]),
                post_token_balance=Decimal(row[5]),
                pre_sol_balance=Decimal(row[6]),
                post_sol_balance=Decimal(row[7]),
                price=Decimal(row[8]),
                date=row[9],
            )
            for row in rows
        ]

    async def get_price_chart(self, mint: str, limit: int = 1000) -> list[HistoricPrice]:
        """Chart points built from the latest ``limit`` trades, oldest first.

        Trades sharing a block time are collapsed into one point carrying
        their mean price. Averaging is the intended aggregation: summing
        would inflate the point whenever several signers trade in the same
        second. Unparseable or non-finite stored prices are skipped.
        """
        cursor = await self._database.db.execute(
            "SELECT block_time, price FROM price_history WHERE mint = ? "
            "ORDER BY block_time DESC LIMIT ?",
            (mint, limit),
        )
        rows = await cursor.fetchall()

        buckets: dict[int, list[Decimal]] = defaultdict(list)
        for block_time, raw_price in rows:
            try:
                price = Decimal(raw_price)
            except InvalidOperation:
                continue
            if price.is_finite():
                buckets[block_time].append(price)

        return [
            HistoricPrice(time=block_time, price=sum(prices) / len(prices))
            for block_time, prices in sorted(buckets.items())
            if prices
        ]

    async def get_status(self) -> dict:
        """Aggregate counts for the status endpoint."""
        db = self._database.db

        cursor = await db.execute("SELECT COUNT(*) FROM tracked_assets WHERE is_active = 1")
        total_assets = (await cursor.fetchone())[0]

        cursor = await db.execute("SELECT COUNT(*) FROM price_history")
        total_trades = (await cursor.fetchone())[0]

        cursor = await db.execute("SELECT MAX(last_synced_at) FROM sync_cursors")
        last_sync_ms = (await cursor.fetchone())[0]

        return {
            "total_assets": total_assets,
            "total_trades": total_trades,
            "last_sync_ms": last_sync_ms,
        }
