"""
Cache module for Folio.

Provides the in-memory TTL cache for live price quotes.
"""

from folio.services.cache.price_cache import (
    CacheEntry,
    PriceCache,
    stock_key,
    crypto_key,
)

__all__ = [
    "CacheEntry",
    "PriceCache",
    "stock_key",
    "crypto_key",
]
