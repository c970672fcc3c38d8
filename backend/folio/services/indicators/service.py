"""
Chart Service Implementation

Builds display-ready performance charts: price series, selected
indicator overlays and summary statistics.
Pure Python/NumPy calculations.
"""

import logging
from datetime import datetime
from typing import Optional

import numpy as np

from folio.schemas.indicators import (
    ChartDataPoint,
    ChartRequest,
    ChartScope,
    ChartStatistics,
    DateRange,
    DateRangeOption,
    IndicatorInfo,
    IndicatorKind,
    IndicatorRequest,
    IndicatorSelection,
    IndicatorSeriesResponse,
    PerformanceChart,
    PricePoint,
)
from folio.services.indicators.interface import ChartServiceInterface
from folio.services.indicators.calculations import (
    EMA_FAST_PERIOD,
    EMA_SLOW_PERIOD,
    RSI_PERIOD,
    SMA_LONG_PERIOD,
    SMA_SHORT_PERIOD,
    ema,
    macd,
    rsi,
    sma,
    to_optional_list,
)
from folio.services.market_data.mock_data import (
    ASSET_START_PRICE,
    ASSET_VOLATILITY,
    HISTORY_DAYS,
    PORTFOLIO_START_PRICE,
    PORTFOLIO_VOLATILITY,
    filter_price_data_by_date_range,
    generate_mock_price_history,
    resolve_date_range,
)

logger = logging.getLogger(__name__)

AVAILABLE_INDICATORS = [
    IndicatorInfo(
        id="sma20",
        name="SMA 20",
        description="Simple Moving Average (20 days)",
        color="oklch(0.577 0.245 27.325)",
    ),
    IndicatorInfo(
        id="sma50",
        name="SMA 50",
        description="Simple Moving Average (50 days)",
        color="oklch(0.577 0.245 142.495)",
    ),
    IndicatorInfo(
        id="ema12",
        name="EMA 12",
        description="Exponential Moving Average (12 days)",
        color="oklch(0.704 0.191 22.216)",
    ),
    IndicatorInfo(
        id="ema26",
        name="EMA 26",
        description="Exponential Moving Average (26 days)",
        color="oklch(0.552 0.016 285.938)",
    ),
    IndicatorInfo(
        id="macd",
        name="MACD",
        description="Moving Average Convergence Divergence",
        color="oklch(0.623 0.214 259.815)",
    ),
]

DATE_RANGE_OPTIONS = [
    DateRangeOption(label="1 Month", value=DateRange.M1),
    DateRangeOption(label="3 Months", value=DateRange.M3),
    DateRangeOption(label="6 Months", value=DateRange.M6),
    DateRangeOption(label="1 Year", value=DateRange.Y1),
    DateRangeOption(label="All Time", value=DateRange.ALL),
]

DEFAULT_PERIODS = {
    IndicatorKind.SMA: SMA_SHORT_PERIOD,
    IndicatorKind.EMA: EMA_FAST_PERIOD,
    IndicatorKind.RSI: RSI_PERIOD,
}


def generate_chart_data(
    points: list[PricePoint],
    selection: Optional[IndicatorSelection] = None,
) -> list[ChartDataPoint]:
    """
    One record per price point carrying only the selected overlays.

    Unselected indicators are not computed. A selected indicator that has
    no value yet at a position is left as None (dropped by exclude_none).
    """
    selection = selection or IndicatorSelection()
    prices = np.array([p.price for p in points], dtype=float)

    overlays: dict[str, list[Optional[float]]] = {}
    if selection.sma20:
        overlays["sma20"] = to_optional_list(sma(prices, SMA_SHORT_PERIOD))
    if selection.sma50:
        overlays["sma50"] = to_optional_list(sma(prices, SMA_LONG_PERIOD))
    if selection.ema12:
        overlays["ema12"] = to_optional_list(ema(prices, EMA_FAST_PERIOD))
    if selection.ema26:
        overlays["ema26"] = to_optional_list(ema(prices, EMA_SLOW_PERIOD))
    if selection.macd:
        result = macd(prices)
        overlays["macd"] = to_optional_list(result.macd)
        overlays["signal"] = to_optional_list(result.signal)
        overlays["histogram"] = to_optional_list(result.histogram)

    chart_data = []
    for i, point in enumerate(points):
        values = {name: series[i] for name, series in overlays.items()}
        chart_data.append(
            ChartDataPoint(date=point.date.date().isoformat(), price=point.price, **values)
        )
    return chart_data


def calculate_statistics(
    prices: list[float], include_volatility: bool = False
) -> Optional[ChartStatistics]:
    """Summary statistics of a price list. None for an empty list."""
    if not prices:
        return None

    arr = np.array(prices, dtype=float)
    start_price = float(arr[0])
    current_price = float(arr[-1])
    return_pct = (current_price - start_price) / start_price * 100 if start_price else 0.0

    return ChartStatistics(
        current_price=round(current_price, 2),
        start_price=round(start_price, 2),
        min_price=round(float(np.min(arr)), 2),
        max_price=round(float(np.max(arr)), 2),
        avg_price=round(float(np.mean(arr)), 2),
        return_percentage=round(return_pct, 2),
        # Population standard deviation
        volatility=round(float(np.std(arr)), 2) if include_volatility else None,
    )


class ChartService(ChartServiceInterface):
    """
    Chart Service.

    Price history is synthetic until a price-history source exists;
    indicator math is deterministic given the history.
    """

    def __init__(self, history_days: int = HISTORY_DAYS):
        self._history_days = history_days

    @property
    def name(self) -> str:
        return "ChartService"

    def _history_for(self, scope: ChartScope, now: datetime) -> list[PricePoint]:
        if scope == ChartScope.ASSET:
            return generate_mock_price_history(
                ASSET_START_PRICE, self._history_days, ASSET_VOLATILITY, end=now
            )
        return generate_mock_price_history(
            PORTFOLIO_START_PRICE, self._history_days, PORTFOLIO_VOLATILITY, end=now
        )

    async def execute(self, input_data: ChartRequest) -> PerformanceChart:
        """Build a performance chart for the requested scope and range."""
        now = datetime.now()
        history = self._history_for(input_data.scope, now)
        return self.build_chart(
            history,
            input_data.date_range,
            input_data.indicators,
            include_volatility=input_data.scope == ChartScope.ASSET,
            now=now,
        )

    def build_chart(
        self,
        history: list[PricePoint],
        date_range: DateRange,
        selection: IndicatorSelection,
        include_volatility: bool = False,
        now: Optional[datetime] = None,
    ) -> PerformanceChart:
        """Filter a history to `date_range` and assemble the display bundle."""
        now = now or datetime.now()
        earliest = history[0].date if history else None
        start = resolve_date_range(date_range, now, earliest)

        filtered = filter_price_data_by_date_range(history, start, now)
        logger.debug(f"Chart {date_range.value}: {len(filtered)} of {len(history)} points")

        return PerformanceChart(
            chart_data=generate_chart_data(filtered, selection),
            statistics=calculate_statistics(
                [p.price for p in filtered], include_volatility=include_volatility
            ),
        )

    def compute_indicator(self, request: IndicatorRequest) -> IndicatorSeriesResponse:
        """Compute one indicator over caller supplied prices."""
        if request.kind == IndicatorKind.MACD:
            result = macd(
                request.prices,
                request.fast_period,
                request.slow_period,
                request.signal_period,
            )
            return IndicatorSeriesResponse(
                kind=request.kind,
                macd=to_optional_list(result.macd),
                signal=to_optional_list(result.signal),
                histogram=to_optional_list(result.histogram),
            )

        period = request.period if request.period is not None else DEFAULT_PERIODS[request.kind]
        if request.kind == IndicatorKind.SMA:
            values = sma(request.prices, period)
        elif request.kind == IndicatorKind.EMA:
            values = ema(request.prices, period)
        else:
            values = rsi(request.prices, period)

        return IndicatorSeriesResponse(
            kind=request.kind, period=period, values=to_optional_list(values)
        )

    def available_indicators(self) -> list[IndicatorInfo]:
        return list(AVAILABLE_INDICATORS)

    def date_range_options(self) -> list[DateRangeOption]:
        return list(DATE_RANGE_OPTIONS)

    async def health_check(self) -> bool:
        """Pure computation - always healthy."""
        return True


# Singleton instance
_service_instance: Optional[ChartService] = None


def get_chart_service() -> ChartService:
    """Get or create chart service instance."""
    global _service_instance
    if _service_instance is None:
        _service_instance = ChartService()
    return _service_instance
