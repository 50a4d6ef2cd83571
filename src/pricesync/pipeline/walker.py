"""Backward pagination over a venue's signature history.

Pages are requested newest-first, each anchored strictly before the oldest
signature of the previous page, until the provider returns an empty page,
the cursor is reached, or the forwarding ceiling is hit.
"""

from pricesync.models import SignatureRecord
from pricesync.pipeline.observer import NullObserver, SyncObserver, notify
from pricesync.pipeline.pacing import PacingPolicy
from pricesync.solana.client import SolanaClient

DEFAULT_MAX_SIGNATURES = 5000


class HistoryWalker:
    """Collects successful signatures for a venue, newest first.

    Usage:
        walker = HistoryWalker(client, PacingPolicy(1.0))
        records = await walker.walk_history(venue, cursor=last_signature)
    """

    def __init__(
        self,
        client: SolanaClient,
        pacing: PacingPolicy | None = None,
        max_signatures: int = DEFAULT_MAX_SIGNATURES,
        page_size: int = 1000,
        observer: SyncObserver | None = None,
    ) -> None:
        self._client = client
        self._pacing = pacing or PacingPolicy()
        self._max_signatures = max_signatures
        self._page_size = page_size
        self._observer = observer or NullObserver()

    async def walk_history(
        self, venue: str, cursor: str | None = None
    ) -> list[SignatureRecord]:
        """Return successful signature records newer than ``cursor``.

        Failed transactions are dropped. The result never contains the cursor
        itself, holds no duplicates, and is capped at ``max_signatures``.
        """
        forwarded: list[SignatureRecord] = []
        seen: set[str] = set()
        before: str | None = None
        pages = 0

        while len(forwarded) < self._max_signatures:
            if pages > 0:
                await self._pacing.wait()

            page = await self._client.get_signatures_for_address(
                venue, before=before, until=cursor, limit=self._page_size
            )
            pages += 1
            if not page:
                break

            reached_cursor = False
            accepted = 0
            for record in page:
                if cursor is not None and record.signature == cursor:
                    reached_cursor = True
                    break
                if record.signature in seen:
                    continue
                seen.add(record.signature)
                if not record.succeeded:
                    continue
                forwarded.append(record)
                accepted += 1
                if len(forwarded) >= self._max_signatures:
                    break

            notify(self._observer, "page_fetched", venue, pages, len(page), accepted)

            oldest = page[-1].signature
            if reached_cursor or oldest == before:
                break
            before = oldest

        notify(self._observer, "walk_complete", venue, pages, len(forwarded))
        return forwarded
