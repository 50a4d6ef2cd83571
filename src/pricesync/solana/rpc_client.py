"""Solana JSON-RPC client implementation via aiohttp.

getParsedTransactions is not a real RPC method: like the JS web3 client, it is
a JSON-RPC batch of getTransaction calls with jsonParsed encoding.
"""

import asyncio
from typing import Any

import aiohttp

from pricesync.config import SolanaSettings
from pricesync.exceptions import RpcError
from pricesync.logging import get_logger
from pricesync.models import DecodedTransaction, SignatureRecord
from pricesync.solana.client import SolanaClient
from pricesync.solana.http import HTTPClient

logger = get_logger(__name__)


def _raise_for_error(method: str, error: Any) -> None:
    if not error:
        return
    if isinstance(error, dict):
        raise RpcError(
            f"{method} failed: {error.get('message', error)}", code=error.get("code")
        )
    raise RpcError(f"{method} failed: {error}")


class SolanaRpcClient(SolanaClient):
    """Concrete Solana client speaking JSON-RPC over HTTP."""

    def __init__(self, settings: SolanaSettings) -> None:
        self._settings = settings
        self._url = settings.rpc_url.get_secret_value()
        self._http = HTTPClient(timeout=settings.request_timeout)
        self._request_id = 0

    async def close(self) -> None:
        await self._http.close()
        logger.info("solana_rpc_closed")

    def _next_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def _post(self, payload: Any) -> Any:
        """POST a JSON-RPC payload, mapping transport failures to RpcError."""
        try:
            return await self._http.post_json(self._url, payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RpcError(f"rpc transport error: {e}") from e

    async def _call(self, method: str, params: list) -> Any:
        response = await self._post(
            {"jsonrpc": "2.0", "id": self._next_id(), "method": method, "params": params}
        )
        if not isinstance(response, dict):
            raise RpcError(f"{method} returned malformed response")
        _raise_for_error(method, response.get("error"))
        return response.get("result")

    async def get_signatures_for_address(
        self,
        address: str,
        before: str | None = None,
        until: str | None = None,
        limit: int = 1000,
    ) -> list[SignatureRecord]:
        config: dict[str, Any] = {"limit": limit, "commitment": self._settings.commitment}
        if before:
            config["before"] = before
        if until:
            config["until"] = until

        result = await self._call("getSignaturesForAddress", [address, config])
        return [SignatureRecord.from_rpc(item) for item in result or []]

    async def get_parsed_transactions(
        self,
        signatures: list[str],
        commitment: str = "confirmed",
        max_supported_transaction_version: int = 0,
    ) -> list[DecodedTransaction | None]:
        if not signatures:
            return []

        config = {
            "encoding": "jsonParsed",
            "commitment": commitment,
            "maxSupportedTransactionVersion": max_supported_transaction_version,
        }
        # Ids only need to be unique within one batch
        payload = [
            {
                "jsonrpc": "2.0",
                "id": offset,
                "method": "getTransaction",
                "params": [signature, config],
            }
            for offset, signature in enumerate(signatures)
        ]

        responses = await self._post(payload)
        if not isinstance(responses, list):
            raise RpcError(f"malformed batch response: {type(responses).__name__}")

        by_id = {r.get("id"): r for r in responses if isinstance(r, dict)}
        transactions: list[DecodedTransaction | None] = []
        for offset in range(len(signatures)):
            response = by_id.get(offset)
            if response is None:
                raise RpcError("batch response missing entries")
            _raise_for_error("getTransaction", response.get("error"))
            result = response.get("result")
            transactions.append(
                DecodedTransaction.from_rpc(result) if result is not None else None
            )
        return transactions
