"""Pacing and retry policies injected into the walker, fetcher and sync.

The provider rate-limits requests, so every stage waits through one of these
objects instead of calling asyncio.sleep directly. Tests pass zero delays.
"""

import asyncio
from dataclasses import dataclass


@dataclass(frozen=True)
class PacingPolicy:
    """Fixed cooperative pause observed between consecutive provider requests."""

    delay: float = 1.0

    async def wait(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    @classmethod
    def none(cls) -> "PacingPolicy":
        return cls(delay=0.0)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a fixed delay between attempts.

    ``max_attempts`` counts the first try, so 5 means one call plus four retries.
    """

    max_attempts: int = 5
    delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def backoff(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
