"""
CONTRACT 2: Indicator Engine

Input: PricePoint series + IndicatorSelection
Output: PerformanceChart (chart data + statistics)

This module defines the display bundle built from a price series.
All math lives in services.indicators.calculations.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


# =============================================================================
# ENUMS
# =============================================================================


class DateRange(str, Enum):
    M1 = "1M"
    M3 = "3M"
    M6 = "6M"
    Y1 = "1Y"
    ALL = "ALL"


class ChartScope(str, Enum):
    PORTFOLIO = "portfolio"
    ASSET = "asset"


class IndicatorKind(str, Enum):
    SMA = "sma"
    EMA = "ema"
    RSI = "rsi"
    MACD = "macd"


# =============================================================================
# INPUT
# =============================================================================


class PricePoint(BaseModel):
    """One observation of a price series."""

    date: datetime
    price: float


class IndicatorSelection(BaseModel):
    """Which overlays to include in chart data."""

    sma20: bool = False
    sma50: bool = False
    ema12: bool = False
    ema26: bool = False
    macd: bool = False


class ChartRequest(BaseModel):
    """
    Request for a performance chart.
    Sent by: Frontend
    Received by: Chart Service
    """

    scope: ChartScope = ChartScope.PORTFOLIO
    date_range: DateRange = DateRange.Y1
    indicators: IndicatorSelection = Field(default_factory=IndicatorSelection)


class IndicatorRequest(BaseModel):
    """Compute a single indicator over caller supplied prices."""

    prices: list[float] = Field(..., max_length=10_000)
    kind: IndicatorKind
    period: Optional[int] = Field(
        default=None, description="Window; defaults per kind (SMA 20, EMA 12, RSI 14)"
    )
    fast_period: int = Field(default=12, ge=1)
    slow_period: int = Field(default=26, ge=1)
    signal_period: int = Field(default=9, ge=1)


# =============================================================================
# OUTPUT
# =============================================================================


class ChartDataPoint(BaseModel):
    """
    Per-date chart record.

    Only selected indicators are populated. Serialize with
    exclude_none so unselected or warming-up overlays are omitted.
    """

    date: str = Field(..., description="YYYY-MM-DD")
    price: float
    sma20: Optional[float] = None
    sma50: Optional[float] = None
    ema12: Optional[float] = None
    ema26: Optional[float] = None
    macd: Optional[float] = None
    signal: Optional[float] = None
    histogram: Optional[float] = None


class ChartStatistics(BaseModel):
    """Summary of the charted prices."""

    current_price: float
    start_price: float
    min_price: float
    max_price: float
    avg_price: float
    return_percentage: float
    volatility: Optional[float] = Field(
        default=None, ge=0, description="Population std dev of prices"
    )


class PerformanceChart(BaseModel):
    """Display bundle: chart data plus statistics."""

    chart_data: list[ChartDataPoint]
    statistics: Optional[ChartStatistics] = None


class IndicatorSeriesResponse(BaseModel):
    """Indicator output aligned with the input prices (None = no value)."""

    kind: IndicatorKind
    period: Optional[int] = None
    values: Optional[list[Optional[float]]] = None
    macd: Optional[list[Optional[float]]] = None
    signal: Optional[list[Optional[float]]] = None
    histogram: Optional[list[Optional[float]]] = None


class IndicatorInfo(BaseModel):
    """Catalogue entry for a chart overlay."""

    id: str
    name: str
    description: str
    color: str


class DateRangeOption(BaseModel):
    label: str
    value: DateRange
