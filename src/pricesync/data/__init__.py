"""Price history persistence layer.

Provides SQLite database management and a typed read/write store for
tracked assets, priced trades and per-asset sync cursors.
"""

from pricesync.data.database import PriceHistoryDatabase
from pricesync.data.store import PriceHistoryStore

__all__ = ["PriceHistoryDatabase", "PriceHistoryStore"]
