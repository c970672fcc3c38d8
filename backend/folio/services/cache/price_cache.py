"""
In-memory cache for live price quotes.

Entries expire a fixed time after insertion. Expiry is checked on read;
nothing is evicted in the background, and a write always replaces.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from folio.schemas.market import CacheStats

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60.0

# Joins crypto pair keys; stock keys must not contain it
PAIR_SEPARATOR = "-"


def stock_key(symbol: str) -> str:
    """Cache key for stocks and funds."""
    return symbol.upper()


def crypto_key(symbol: str, market: str) -> str:
    """Cache key for a crypto/currency pair, e.g. BTC-USD."""
    return f"{symbol.upper()}{PAIR_SEPARATOR}{market.upper()}"


@dataclass
class CacheEntry:
    """A cached price. inserted_at is a reading of the cache clock."""

    key: str
    symbol: str
    price: float
    inserted_at: float
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class PriceCache:
    """
    Time-expiring key -> price store.

    Keys:
    - {SYMBOL} -> stock / fund quote
    - {SYMBOL}-{MARKET} -> crypto exchange rate

    Unsynchronised dict: concurrent writers for the same key are
    last-write-wins.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def age(self, entry: CacheEntry) -> float:
        return self._clock() - entry.inserted_at

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry if it is still fresh, else None (miss)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.age(entry) >= self._ttl:
            logger.debug(f"Cache entry {key} is stale")
            return None
        return entry

    def set(
        self,
        key: str,
        symbol: str,
        price: float,
        fetched_at: Optional[datetime] = None,
    ) -> CacheEntry:
        """Store a price under key, replacing any previous entry."""
        entry = CacheEntry(
            key=key,
            symbol=symbol,
            price=price,
            inserted_at=self._clock(),
            fetched_at=fetched_at or datetime.now(timezone.utc),
        )
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def stats(self) -> CacheStats:
        """Entry count and keys, stale entries included."""
        return CacheStats(size=len(self._entries), entries=list(self._entries))
