"""Solana data sources -- JSON-RPC history provider and Raydium pool registry."""

from pricesync.solana.client import SolanaClient, VenueRegistry
from pricesync.solana.raydium import RaydiumRegistry
from pricesync.solana.rpc_client import SolanaRpcClient

__all__ = ["RaydiumRegistry", "SolanaClient", "SolanaRpcClient", "VenueRegistry"]
