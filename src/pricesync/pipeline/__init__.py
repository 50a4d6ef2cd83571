"""Price derivation pipeline.

Venue resolution, backward signature pagination, batched transaction
retrieval with retry, and per-signer price derivation.
"""

from pricesync.pipeline.deriver import derive_prices
from pricesync.pipeline.fetcher import BatchFetcher, BatchResult, BatchStatus, chunk_signatures
from pricesync.pipeline.observer import NullObserver, StructlogObserver, SyncObserver
from pricesync.pipeline.pacing import PacingPolicy, RetryPolicy
from pricesync.pipeline.resolver import VenueResolver
from pricesync.pipeline.sync import PriceHistorySync, SyncResult
from pricesync.pipeline.walker import HistoryWalker

__all__ = [
    "BatchFetcher",
    "BatchResult",
    "BatchStatus",
    "HistoryWalker",
    "NullObserver",
    "PacingPolicy",
    "PriceHistorySync",
    "RetryPolicy",
    "StructlogObserver",
    "SyncObserver",
    "SyncResult",
    "VenueResolver",
    "chunk_signatures",
    "derive_prices",
]
