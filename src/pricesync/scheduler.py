"""Scheduled driver that keeps every tracked asset's price history current.

Each cycle:
  1. LOAD: read active tracked assets from the store
  2. SYNC: for each asset, read its cursor and run the price pipeline,
     persisting trades batch by batch
  3. ADVANCE: write the new cursor once the asset's run has completed
  4. SLEEP: wait scan_interval seconds (interruptible by stop())

Assets are independent pipeline runs; up to max_concurrent_assets of them
run at once. Any pipeline failure for one asset is logged and the cycle moves
on with the cursor untouched. Store failures abort the cycle; the loop logs
them and tries again on the next interval.
"""

import asyncio
import time

import structlog

from pricesync.config import SyncSettings
from pricesync.data.store import PriceHistoryStore
from pricesync.exceptions import RpcError, StoreError
from pricesync.logging import get_logger
from pricesync.pipeline.sync import PriceHistorySync, SyncResult

logger = get_logger(__name__)


class PriceHistoryScheduler:
    """Runs PriceHistorySync for every tracked asset on a fixed interval."""

    def __init__(
        self,
        store: PriceHistoryStore,
        sync: PriceHistorySync,
        settings: SyncSettings,
    ) -> None:
        self._store = store
        self._sync = sync
        self._settings = settings
        self._semaphore = asyncio.Semaphore(max(1, settings.max_concurrent_assets))
        self._stop_event = asyncio.Event()
        self._running = False
        self.last_cycle: dict | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Run sync cycles until stop() is called."""
        self._running = True
        self._stop_event.clear()
        logger.info("scheduler_starting", scan_interval=self._settings.scan_interval)
        try:
            while not self._stop_event.is_set():
                try:
                    await self.run_once()
                except asyncio.CancelledError:
                    break
                except Exception as e:
                    logger.error("sync_cycle_error", error=str(e), exc_info=True)
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(), timeout=self._settings.scan_interval
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            logger.info("scheduler_stopped")

    async def stop(self) -> None:
        """Signal the loop to exit after the current cycle."""
        self._stop_event.set()

    async def run_once(self) -> dict:
        """Sync every active tracked asset once and return a cycle summary."""
        start_time = time.monotonic()
        assets = await self._store.get_assets(active_only=True)

        results = await asyncio.gather(
            *(self.sync_asset(asset["mint"]) for asset in assets)
        )

        synced = [r for r in results if r is not None]
        summary = {
            "assets": len(assets),
            "synced": len(synced),
            "failed": len(assets) - len(synced),
            "trades": sum(len(r.trades) for r in synced),
            "duration_seconds": round(time.monotonic() - start_time, 1),
        }
        self.last_cycle = summary
        logger.info("sync_cycle_complete", **summary)
        return summary

    async def sync_asset(self, mint: str) -> SyncResult | None:
        """Sync one asset and advance its cursor.

        Returns None when the pipeline failed for this asset; the
        cursor is left untouched so the next cycle retries the same range.
        """
        async with self._semaphore:
            with structlog.contextvars.bound_contextvars(mint=mint):
                cursor = await self._store.get_cursor(mint)
                try:
                    result = await self._sync.run(
                        mint, cursor, on_batch=self._store.insert_trades
                    )
                except StoreError:
                    raise
                except RpcError as e:
                    logger.error("asset_sync_failed", error=str(e), cursor=cursor)
                    return None
                except Exception as e:
                    logger.error(
                        "asset_sync_error", error=str(e), cursor=cursor, exc_info=True
                    )
                    return None

                if result.cursor and result.cursor != cursor:
                    await self._store.update_cursor(mint, result.cursor)

                logger.info(
                    "historical_transactions_found",
                    venue=result.venue,
                    signatures=result.signatures,
                    trades=len(result.trades),
                    failed_batches=result.failed_batches,
                )
                return result
