"""Tests for the Raydium venue registry."""

from unittest.mock import AsyncMock

import aiohttp
import pytest

from pricesync.config import SolanaSettings
from pricesync.exceptions import VenueRegistryError
from pricesync.solana.addresses import NATIVE_MINT
from pricesync.solana.raydium import RaydiumRegistry

MINT = "4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R"


@pytest.fixture
def registry() -> RaydiumRegistry:
    registry = RaydiumRegistry(SolanaSettings(raydium_api_url="https://raydium.test/"))
    registry._http = AsyncMock()
    return registry


class TestFindVenue:
    @pytest.mark.asyncio
    async def test_returns_first_pool(self, registry: RaydiumRegistry) -> None:
        registry._http.get_json = AsyncMock(
            return_value={
                "success": True,
                "data": {"count": 2, "data": [{"id": "poolA"}, {"id": "poolB"}]},
            }
        )

        venue = await registry.find_venue(MINT, NATIVE_MINT)

        assert venue == "poolA"
        url = registry._http.get_json.await_args.args[0]
        params = registry._http.get_json.await_args.kwargs["params"]
        assert url == "https://raydium.test/pools/info/mint"
        assert params["mint1"] == MINT
        assert params["mint2"] == NATIVE_MINT

    @pytest.mark.asyncio
    async def test_unlisted_returns_none(self, registry: RaydiumRegistry) -> None:
        registry._http.get_json = AsyncMock(
            return_value={"success": True, "data": {"count": 0, "data": []}}
        )

        assert await registry.find_venue(MINT, NATIVE_MINT) is None

    @pytest.mark.asyncio
    async def test_unsuccessful_response_raises(self, registry: RaydiumRegistry) -> None:
        registry._http.get_json = AsyncMock(return_value={"success": False, "msg": "bad"})

        with pytest.raises(VenueRegistryError):
            await registry.find_venue(MINT, NATIVE_MINT)

    @pytest.mark.asyncio
    async def test_http_error_raises(self, registry: RaydiumRegistry) -> None:
        registry._http.get_json = AsyncMock(side_effect=aiohttp.ClientConnectionError())

        with pytest.raises(VenueRegistryError):
            await registry.find_venue(MINT, NATIVE_MINT)
