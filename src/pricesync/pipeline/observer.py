"""Observer hooks invoked at pipeline checkpoints.

Pipeline stages report progress through a SyncObserver instead of logging
inline. A broken observer must never change a sync result, so stages call
hooks through ``notify``.
"""

from typing import Any, Protocol

from pricesync.logging import get_logger

logger = get_logger(__name__)


class SyncObserver(Protocol):
    """Checkpoints reported by the venue resolver, walker, fetcher and sync."""

    def venue_resolved(self, mint: str, venue: str, source: str) -> None: ...

    def registry_failed(self, mint: str, error: Exception) -> None: ...

    def page_fetched(self, venue: str, page: int, received: int, forwarded: int) -> None: ...

    def walk_complete(self, venue: str, pages: int, forwarded: int) -> None: ...

    def batch_started(self, mint: str, index: int, total: int, size: int) -> None: ...

    def batch_retry(self, attempt: int, max_attempts: int, error: Exception) -> None: ...

    def batch_exhausted(self, attempts: int, size: int, error: Exception | None) -> None: ...

    def batch_finished(self, mint: str, index: int, fetched: int, trades: int) -> None: ...

    def sync_complete(self, mint: str, signatures: int, trades: int, failed_batches: int) -> None: ...


class NullObserver:
    """Observer that ignores every checkpoint."""

    def __getattr__(self, name: str) -> Any:
        return lambda *args, **kwargs: None


class StructlogObserver:
    """Observer that writes each checkpoint as a structured log event."""

    def __init__(self, name: str = "pricesync.pipeline") -> None:
        self._logger = get_logger(name)

    def venue_resolved(self, mint: str, venue: str, source: str) -> None:
        self._logger.info("venue_resolved", mint=mint, venue=venue, source=source)

    def registry_failed(self, mint: str, error: Exception) -> None:
        self._logger.warning("venue_registry_failed", mint=mint, error=str(error))

    def page_fetched(self, venue: str, page: int, received: int, forwarded: int) -> None:
        self._logger.debug(
            "signature_page_fetched",
            venue=venue,
            page=page,
            received=received,
            forwarded=forwarded,
        )

    def walk_complete(self, venue: str, pages: int, forwarded: int) -> None:
        self._logger.info("history_walk_complete", venue=venue, pages=pages, signatures=forwarded)

    def batch_started(self, mint: str, index: int, total: int, size: int) -> None:
        self._logger.debug("batch_started", mint=mint, progress=f"{index}/{total}", size=size)

    def batch_retry(self, attempt: int, max_attempts: int, error: Exception) -> None:
        self._logger.warning(
            "batch_fetch_retry",
            attempt=attempt,
            max_attempts=max_attempts,
            error=str(error),
        )

    def batch_exhausted(self, attempts: int, size: int, error: Exception | None) -> None:
        self._logger.error(
            "batch_fetch_failed_permanently",
            attempts=attempts,
            size=size,
            error=str(error),
        )

    def batch_finished(self, mint: str, index: int, fetched: int, trades: int) -> None:
        self._logger.debug("batch_finished", mint=mint, batch=index, fetched=fetched, trades=trades)

    def sync_complete(self, mint: str, signatures: int, trades: int, failed_batches: int) -> None:
        self._logger.info(
            "price_history_synced",
            mint=mint,
            signatures=signatures,
            trades=trades,
            failed_batches=failed_batches,
        )


def notify(observer: SyncObserver, hook: str, *args: Any) -> None:
    """Invoke an observer hook, containing any exception it raises."""
    try:
        getattr(observer, hook)(*args)
    except Exception as e:
        logger.debug("observer_hook_failed", hook=hook, error=str(e))
