"""Per-mint price history sync: resolve -> walk -> fetch -> derive.

Stages run strictly in sequence. Batch N+1 is never dispatched before batch N
has either resolved or exhausted its retries, and the batch pacing pause is
observed before every dispatch.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from pricesync.config import SolanaSettings, SyncSettings
from pricesync.models import PricedTrade
from pricesync.pipeline.deriver import DEFAULT_TOKEN_DECIMALS, derive_prices
from pricesync.pipeline.fetcher import (
    DEFAULT_BATCH_SIZE,
    BatchFetcher,
    BatchStatus,
    chunk_signatures,
)
from pricesync.pipeline.observer import NullObserver, SyncObserver, notify
from pricesync.pipeline.pacing import PacingPolicy, RetryPolicy
from pricesync.pipeline.resolver import VenueResolver
from pricesync.pipeline.walker import HistoryWalker
from pricesync.solana.client import SolanaClient, VenueRegistry

BatchCallback = Callable[[list[PricedTrade]], Awaitable[object]]


@dataclass
class SyncResult:
    """Outcome of one sync run for one mint.

    ``cursor`` is the newest signature walked in this run, or the cursor the
    run started from when nothing new was found.
    """

    mint: str
    venue: str
    cursor: str | None
    signatures: int = 0
    batches: int = 0
    failed_batches: int = 0
    trades: list[PricedTrade] = field(default_factory=list)


class PriceHistorySync:
    """Derives priced trades for a mint from its venue's transaction history.

    Usage:
        sync = PriceHistorySync.from_settings(client, registry, settings.sync, settings.solana)
        trades = await sync.sync_price_history(mint, cursor=last_signature)
    """

    def __init__(
        self,
        resolver: VenueResolver,
        walker: HistoryWalker,
        fetcher: BatchFetcher,
        batch_pacing: PacingPolicy | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        decimals: int = DEFAULT_TOKEN_DECIMALS,
        observer: SyncObserver | None = None,
    ) -> None:
        self._resolver = resolver
        self._walker = walker
        self._fetcher = fetcher
        self._batch_pacing = batch_pacing or PacingPolicy()
        self._batch_size = batch_size
        self._decimals = decimals
        self._observer = observer or NullObserver()

    @classmethod
    def from_settings(
        cls,
        client: SolanaClient,
        registry: VenueRegistry,
        settings: SyncSettings,
        solana_settings: SolanaSettings,
        observer: SyncObserver | None = None,
    ) -> "PriceHistorySync":
        """Build the full pipeline from configuration."""
        return cls(
            resolver=VenueResolver(
                registry,
                program_id=solana_settings.bonding_curve_program,
                observer=observer,
            ),
            walker=HistoryWalker(
                client,
                pacing=PacingPolicy(settings.page_delay),
                max_signatures=settings.max_signatures,
                page_size=settings.page_size,
                observer=observer,
            ),
            fetcher=BatchFetcher(
                client,
                retry=RetryPolicy(settings.max_retries, settings.retry_delay),
                commitment=solana_settings.commitment,
                observer=observer,
            ),
            batch_pacing=PacingPolicy(settings.batch_delay),
            batch_size=settings.batch_size,
            decimals=settings.token_decimals,
            observer=observer,
        )

    async def sync_price_history(
        self, mint: str, cursor: str | None = None
    ) -> list[PricedTrade]:
        """Priced trades newer than ``cursor``, newest transaction first."""
        result = await self.run(mint, cursor)
        return result.trades

    async def run(
        self,
        mint: str,
        cursor: str | None = None,
        on_batch: BatchCallback | None = None,
    ) -> SyncResult:
        """Run the pipeline and report trades, the new cursor and batch counters.

        ``on_batch`` receives each batch's trades as soon as the batch is
        derived, so a caller can persist incrementally. Cancelling the run
        while a batch is being fetched discards that batch entirely.
        """
        venue = await self._resolver.resolve_venue(mint)
        records = await self._walker.walk_history(venue, cursor)

        result = SyncResult(
            mint=mint,
            venue=venue,
            cursor=records[0].signature if records else cursor,
            signatures=len(records),
        )

        batches = list(chunk_signatures(records, self._batch_size))
        for index, batch in enumerate(batches, 1):
            await self._batch_pacing.wait()
            notify(self._observer, "batch_started", mint, index, len(batches), len(batch))

            fetched = await self._fetcher.fetch_batch(batch)
            result.batches += 1
            if fetched.status is BatchStatus.EXHAUSTED:
                result.failed_batches += 1

            batch_trades: list[PricedTrade] = []
            for tx in fetched.transactions:
                batch_trades.extend(derive_prices(tx, mint, self._decimals))

            notify(
                self._observer,
                "batch_finished",
                mint,
                index,
                len(fetched.transactions),
                len(batch_trades),
            )
            result.trades.extend(batch_trades)
            if on_batch is not None and batch_trades:
                await on_batch(batch_trades)

        notify(
            self._observer,
            "sync_complete",
            mint,
            result.signatures,
            len(result.trades),
            result.failed_batches,
        )
        return result
