"""Shared aiohttp session helper for the RPC and registry clients."""

from typing import Any

import aiohttp


class HTTPClient:
    """Async HTTP client wrapper with a lazily created session."""

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        async with self.session.get(url, params=params) as response:
            response.raise_for_status()
            return await response.json()

    async def post_json(self, url: str, payload: Any) -> Any:
        async with self.session.post(url, json=payload) as response:
            response.raise_for_status()
            return await response.json()

    async def close(self) -> None:
        """Close session."""
        if self._session and not self._session.closed:
            await self._session.close()
