"""
CONTRACT 1: Market Data Layer

Input: symbols / holdings
Output: PriceQuote, TimeSeriesPoint, HoldingHistory

Live prices come from the quote provider through the price cache.
A missing quote is represented by absence (None), never by an error payload.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class HoldingType(str, Enum):
    STOCK = "stock"
    CRYPTO = "crypto"
    FUND = "fund"


class OutputSize(str, Enum):
    COMPACT = "compact"
    FULL = "full"


class IntradayInterval(str, Enum):
    MIN1 = "1min"
    MIN5 = "5min"
    MIN15 = "15min"
    MIN30 = "30min"
    MIN60 = "60min"


# =============================================================================
# QUOTES
# =============================================================================


class PriceQuote(BaseModel):
    """
    Live price for a stock, fund or crypto pair.

    Quotes served from the cache carry the original fetch time and
    no change fields.
    """

    symbol: str = Field(..., description="Ticker (AAPL) or pair (BTC/USD)")
    price: float = Field(..., ge=0)
    timestamp: datetime
    change: Optional[float] = None
    change_percent: Optional[str] = Field(
        default=None, description="Provider formatted, e.g. '1.69%'"
    )


class TimeSeriesPoint(BaseModel):
    """Single daily or intraday candle."""

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: int = Field(..., ge=0)


# =============================================================================
# HOLDINGS
# =============================================================================


class HoldingRef(BaseModel):
    """A holding whose live price is requested."""

    symbol: str = Field(..., min_length=1, max_length=10)
    type: HoldingType


class HoldingPricesRequest(BaseModel):
    holdings: list[HoldingRef] = Field(..., max_length=50)


class HoldingHistory(BaseModel):
    """Recent daily history for a holding."""

    symbol: str
    type: HoldingType
    data: list[TimeSeriesPoint]
    count: int


# =============================================================================
# CACHE
# =============================================================================


class CacheStats(BaseModel):
    """Snapshot of the quote cache."""

    size: int = Field(..., ge=0)
    entries: list[str]
