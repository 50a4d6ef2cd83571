"""Abstract Solana data-source interfaces.

Pipeline code depends only on these contracts, keeping JSON-RPC and
registry HTTP details isolated in the concrete implementations.
"""

from abc import ABC, abstractmethod

from pricesync.models import DecodedTransaction, SignatureRecord


class SolanaClient(ABC):
    """Abstract base class for Solana transaction-history providers."""

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
        ...

    @abstractmethod
    async def get_signatures_for_address(
        self,
        address: str,
        before: str | None = None,
        until: str | None = None,
        limit: int = 1000,
    ) -> list[SignatureRecord]:
        """Fetch one page of signatures involving ``address``, newest first.

        ``before`` starts the page strictly older than that signature;
        ``until`` stops the page before reaching that signature.

        Pagination is NOT handled here -- callers are responsible for
        iterating with the ``before`` anchor.
        """
        ...

    @abstractmethod
    async def get_parsed_transactions(
        self,
        signatures: list[str],
        commitment: str = "confirmed",
        max_supported_transaction_version: int = 0,
    ) -> list[DecodedTransaction | None]:
        """Fetch parsed transaction bodies, one entry per input signature.

        Entries are None for signatures the provider could not resolve.
        Raises on transport or provider errors.
        """
        ...


class VenueRegistry(ABC):
    """Abstract lookup of primary-market pools for a token pair."""

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
        ...

    @abstractmethod
    async def find_venue(self, mint: str, quote_mint: str) -> str | None:
        """Return the address of the first pool pairing ``mint`` with ``quote_mint``.

        Returns None when the pair is not listed.
        """
        ...
