"""
Folio Schema Contracts

This module defines all JSON contracts between system components.
These are the authoritative interfaces - all modules must conform to these schemas.
"""

from folio.schemas.market import (
    HoldingType,
    PriceQuote,
    TimeSeriesPoint,
    HoldingRef,
    HoldingHistory,
    CacheStats,
)
from folio.schemas.indicators import (
    DateRange,
    PricePoint,
    IndicatorSelection,
    ChartRequest,
    ChartDataPoint,
    ChartStatistics,
    PerformanceChart,
    IndicatorRequest,
    IndicatorSeriesResponse,
)

__all__ = [
    # Market
    "HoldingType",
    "PriceQuote",
    "TimeSeriesPoint",
    "HoldingRef",
    "HoldingHistory",
    "CacheStats",
    # Indicators
    "DateRange",
    "PricePoint",
    "IndicatorSelection",
    "ChartRequest",
    "ChartDataPoint",
    "ChartStatistics",
    "PerformanceChart",
    "IndicatorRequest",
    "IndicatorSeriesResponse",
]
