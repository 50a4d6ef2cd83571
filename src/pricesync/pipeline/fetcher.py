"""Batched transaction retrieval with bounded fixed-delay retry.

A batch either resolves in one provider call or is retried until the retry
policy is exhausted, at which point it yields nothing. Exhaustion is
reported, never raised, so one bad batch cannot abort a sync run.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum

from pricesync.models import DecodedTransaction, SignatureRecord
from pricesync.pipeline.observer import NullObserver, SyncObserver, notify
from pricesync.pipeline.pacing import RetryPolicy
from pricesync.solana.client import SolanaClient

DEFAULT_BATCH_SIZE = 100


class BatchStatus(str, Enum):
    """Outcome of one batch fetch."""

    COMPLETE = "complete"  # every signature resolved
    PARTIAL = "partial"  # provider returned null for some signatures
    EXHAUSTED = "exhausted"  # every attempt failed


@dataclass
class BatchResult:
    """Transactions fetched for one batch plus how the fetch went."""

    status: BatchStatus
    requested: int
    attempts: int
    transactions: list[DecodedTransaction] = field(default_factory=list)

    @property
    def missing(self) -> int:
        return self.requested - len(self.transactions)


def chunk_signatures(
    records: Sequence[SignatureRecord], batch_size: int = DEFAULT_BATCH_SIZE
) -> Iterator[list[str]]:
    """Split walker output into ordered signature batches."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    for start in range(0, len(records), batch_size):
        yield [r.signature for r in records[start : start + batch_size]]


class BatchFetcher:
    """Fetches parsed transaction bodies for one batch of signatures."""

    def __init__(
        self,
        client: SolanaClient,
        retry: RetryPolicy | None = None,
        commitment: str = "confirmed",
        observer: SyncObserver | None = None,
    ) -> None:
        self._client = client
        self._retry = retry or RetryPolicy()
        self._commitment = commitment
        self._observer = observer or NullObserver()

    async def fetch_batch(self, signatures: Sequence[str]) -> BatchResult:
        """Fetch ``signatures`` in one call, retrying on any error.

        Null provider entries are dropped, so the result never holds more
        transactions than signatures requested.
        """
        requested = len(signatures)
        if requested == 0:
            return BatchResult(BatchStatus.COMPLETE, requested=0, attempts=0)

        last_error: Exception | None = None
        for attempt in range(1, self._retry.max_attempts + 1):
            try:
                response = await self._client.get_parsed_transactions(
                    list(signatures),
                    commitment=self._commitment,
                    max_supported_transaction_version=0,
                )
                if response is None or len(response) != requested:
                    raise ValueError(
                        f"expected {requested} transaction entries, got "
                        f"{0 if response is None else len(response)}"
                    )
            except Exception as e:
                last_error = e
                notify(self._observer, "batch_retry", attempt, self._retry.max_attempts, e)
                if attempt < self._retry.max_attempts:
                    await self._retry.backoff()
                continue

            transactions = [tx for tx in response if tx is not None]
            status = (
                BatchStatus.COMPLETE
                if len(transactions) == requested
                else BatchStatus.PARTIAL
            )
            return BatchResult(status, requested, attempt, transactions)

        notify(self._observer, "batch_exhausted", self._retry.max_attempts, requested, last_error)
        return BatchResult(BatchStatus.EXHAUSTED, requested, self._retry.max_attempts)
