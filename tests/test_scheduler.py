"""Tests for the scheduled per-asset driver.

Uses a real SQLite store in tmp_path and a mocked PriceHistorySync.
"""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from pricesync.config import SyncSettings
from pricesync.data.database import PriceHistoryDatabase
from pricesync.data.store import PriceHistoryStore
from pricesync.exceptions import RpcError, StoreError
from pricesync.models import PricedTrade, TradeType
from pricesync.pipeline.sync import SyncResult
from pricesync.scheduler import PriceHistoryScheduler

MINT_A = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZsaAkJ9"
MINT_B = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"


def _trade(mint: str, signature: str) -> PricedTrade:
    return PricedTrade(
        signature=signature,
        mint=mint,
        type=TradeType.BUY,
        owner="owner",
        pre_token_balance=Decimal("0"),
        post_token_balance=Decimal("1"),
        pre_sol_balance=Decimal("1"),
        post_sol_balance=Decimal("0.5"),
        price=Decimal("2"),
        date=1_700_000_000,
    )


def _fake_sync(results: dict) -> AsyncMock:
    """Mock sync whose run() persists via on_batch like the real pipeline."""

    async def _run(mint, cursor=None, on_batch=None):
        outcome = results[mint]
        if isinstance(outcome, Exception):
            raise outcome
        if on_batch is not None and outcome.trades:
            await on_batch(outcome.trades)
        return outcome

    sync = AsyncMock()
    sync.run = AsyncMock(side_effect=_run)
    return sync


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_persists_trades_and_advances_cursor(
        self, tmp_path, sync_settings: SyncSettings
    ) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            await store.add_asset(MINT_A)
            await store.update_cursor(MINT_A, "old")

            trades = [_trade(MINT_A, "new"), _trade(MINT_A, "mid")]
            sync = _fake_sync(
                {MINT_A: SyncResult(MINT_A, "pool", cursor="new", signatures=2, trades=trades)}
            )
            scheduler = PriceHistoryScheduler(store, sync, sync_settings)

            summary = await scheduler.run_once()

            sync.run.assert_awaited_once()
            assert sync.run.await_args.args == (MINT_A, "old")
            assert await store.get_cursor(MINT_A) == "new"
            assert len(await store.get_trades(MINT_A)) == 2
            assert summary["synced"] == 1
            assert summary["trades"] == 2

    @pytest.mark.asyncio
    async def test_provider_failure_skips_only_that_asset(
        self, tmp_path, sync_settings: SyncSettings
    ) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            await store.add_asset(MINT_A)
            await store.add_asset(MINT_B)
            await store.update_cursor(MINT_A, "kept")

            sync = _fake_sync(
                {
                    MINT_A: RpcError("rate limited"),
                    MINT_B: SyncResult(
                        MINT_B, "pool", cursor="b1", signatures=1, trades=[_trade(MINT_B, "b1")]
                    ),
                }
            )
            scheduler = PriceHistoryScheduler(store, sync, sync_settings)

            summary = await scheduler.run_once()

            assert await store.get_cursor(MINT_A) == "kept"
            assert await store.get_cursor(MINT_B) == "b1"
            assert summary["assets"] == 2
            assert summary["synced"] == 1
            assert summary["failed"] == 1

    @pytest.mark.asyncio
    async def test_no_new_history_leaves_cursor_unset(
        self, tmp_path, sync_settings: SyncSettings
    ) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            await store.add_asset(MINT_A)

            sync = _fake_sync({MINT_A: SyncResult(MINT_A, "pool", cursor=None)})
            scheduler = PriceHistoryScheduler(store, sync, sync_settings)

            await scheduler.run_once()

            assert await store.get_cursor(MINT_A) is None

    @pytest.mark.asyncio
    async def test_inactive_assets_are_skipped(
        self, tmp_path, sync_settings: SyncSettings
    ) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            await store.add_asset(MINT_A, is_active=False)

            sync = _fake_sync({})
            scheduler = PriceHistoryScheduler(store, sync, sync_settings)

            summary = await scheduler.run_once()

            sync.run.assert_not_awaited()
            assert summary["assets"] == 0


class TestLoop:
    @pytest.mark.asyncio
    async def test_stop_ends_loop(self, tmp_path, sync_settings: SyncSettings) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            scheduler = PriceHistoryScheduler(store, _fake_sync({}), sync_settings)

            task = asyncio.create_task(scheduler.start())
            await asyncio.sleep(0.05)
            assert scheduler.is_running

            await scheduler.stop()
            await asyncio.wait_for(task, timeout=2)

            assert not scheduler.is_running
            assert scheduler.last_cycle is not None

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_loop_and_siblings_alive(
        self, tmp_path, sync_settings: SyncSettings
    ) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            await store.add_asset(MINT_A)
            await store.add_asset(MINT_B)
            await store.update_cursor(MINT_A, "kept")

            sync = _fake_sync(
                {
                    MINT_A: ValueError("Expecting value: line 1 column 1 (char 0)"),
                    MINT_B: SyncResult(
                        MINT_B, "pool", cursor="b1", signatures=1, trades=[_trade(MINT_B, "b1")]
                    ),
                }
            )
            settings = sync_settings.model_copy(update={"scan_interval": 0})
            scheduler = PriceHistoryScheduler(store, sync, settings)

            task = asyncio.create_task(scheduler.start())
            await asyncio.sleep(0.1)

            assert not task.done()
            # at least two full cycles over both assets
            assert sync.run.await_count >= 4
            assert await store.get_cursor(MINT_A) == "kept"
            assert await store.get_cursor(MINT_B) == "b1"
            assert scheduler.last_cycle["failed"] == 1

            await scheduler.stop()
            await asyncio.wait_for(task, timeout=2)

    @pytest.mark.asyncio
    async def test_failed_cycle_is_retried_next_interval(
        self, tmp_path, sync_settings: SyncSettings
    ) -> None:
        async with PriceHistoryDatabase(str(tmp_path / "prices.db")) as database:
            store = PriceHistoryStore(database)
            real_get_assets = store.get_assets
            calls = 0

            async def _flaky_get_assets(active_only: bool = True):
                nonlocal calls
                calls += 1
                if calls == 1:
                    raise StoreError("database is locked")
                return await real_get_assets(active_only=active_only)

            store.get_assets = _flaky_get_assets
            settings = sync_settings.model_copy(update={"scan_interval": 0})
            scheduler = PriceHistoryScheduler(store, _fake_sync({}), settings)

            task = asyncio.create_task(scheduler.start())
            await asyncio.sleep(0.1)

            assert not task.done()
            assert calls >= 2
            assert scheduler.last_cycle is not None

            await scheduler.stop()
            await asyncio.wait_for(task, timeout=2)
