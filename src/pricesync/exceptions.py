"""Custom exceptions for the price history sync service.

Transport and collaborator exceptions live here to avoid circular imports
between the solana client layer, the pipeline, and the persistence layer.
"""


class PriceSyncError(Exception):
    """Base exception for all price sync errors."""


class RpcError(PriceSyncError):
    """Raised when a Solana JSON-RPC call fails or returns an error object."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class VenueRegistryError(PriceSyncError):
    """Raised when the venue registry cannot be queried or returns garbage."""


class StoreError(PriceSyncError):
    """Raised when the persistence layer is used before it is ready."""
