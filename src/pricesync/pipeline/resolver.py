"""Venue resolution: where does a mint trade against SOL?

A listed primary-market pool wins; otherwise the mint is assumed to still be
on its launchpad bonding curve, whose address is derived from the mint.
"""

from pricesync.pipeline.observer import NullObserver, SyncObserver, notify
from pricesync.solana.addresses import (
    NATIVE_MINT,
    PUMPFUN_PROGRAM_ID,
    find_bonding_curve_address,
)
from pricesync.solana.client import VenueRegistry


class VenueResolver:
    """Resolves the pool address whose history carries a mint's trades.

    Registry errors are reported to the observer and treated as "not listed";
    resolution itself never raises for registry problems.
    """

    def __init__(
        self,
        registry: VenueRegistry,
        program_id: str = PUMPFUN_PROGRAM_ID,
        observer: SyncObserver | None = None,
    ) -> None:
        self._registry = registry
        self._program_id = program_id
        self._observer = observer or NullObserver()

    async def resolve_venue(self, mint: str) -> str:
        venue: str | None = None
        try:
            venue = await self._registry.find_venue(mint, NATIVE_MINT)
        except Exception as e:
            notify(self._observer, "registry_failed", mint, e)

        if venue:
            notify(self._observer, "venue_resolved", mint, venue, "registry")
            return venue

        venue = find_bonding_curve_address(mint, self._program_id)
        notify(self._observer, "venue_resolved", mint, venue, "fallback")
        return venue
