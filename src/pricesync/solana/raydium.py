"""Raydium v3 API implementation of the venue registry."""

from typing import Any

import aiohttp

from pricesync.config import SolanaSettings
from pricesync.exceptions import VenueRegistryError
from pricesync.logging import get_logger
from pricesync.solana.client import VenueRegistry
from pricesync.solana.http import HTTPClient

logger = get_logger(__name__)


class RaydiumRegistry(VenueRegistry):
    """Looks up Raydium pools for a mint pair via /pools/info/mint."""

    def __init__(self, settings: SolanaSettings) -> None:
        self._base_url = settings.raydium_api_url.rstrip("/")
        self._http = HTTPClient(timeout=settings.request_timeout)

    async def close(self) -> None:
        await self._http.close()

    async def find_venue(self, mint: str, quote_mint: str) -> str | None:
        params = {
            "mint1": mint,
            "mint2": quote_mint,
            "poolType": "all",
            "poolSortField": "default",
            "sortType": "desc",
            "pageSize": 100,
            "page": 1,
        }
        try:
            body: Any = await self._http.get_json(
                f"{self._base_url}/pools/info/mint", params=params
            )
        except aiohttp.ClientError as e:
            raise VenueRegistryError(f"raydium lookup failed: {e}") from e

        if not isinstance(body, dict) or not body.get("success", False):
            raise VenueRegistryError(f"raydium returned unsuccessful response for {mint}")

        pools = (body.get("data") or {}).get("data") or []
        if not pools:
            return None

        logger.debug("raydium_pools_found", mint=mint, count=len(pools))
        return pools[0]["id"]
