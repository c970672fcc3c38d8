"""
Chart service tests: overlay projection, statistics, date ranges and
single-indicator computation.
"""

from datetime import datetime, timedelta

import pytest

from folio.schemas.indicators import (
    ChartRequest,
    ChartScope,
    DateRange,
    IndicatorKind,
    IndicatorRequest,
    IndicatorSelection,
    PricePoint,
)
from folio.services.indicators.service import (
    ChartService,
    calculate_statistics,
    generate_chart_data,
)
from folio.services.market_data.mock_data import generate_mock_price_history

END = datetime(2026, 1, 31, 12, 0)


def _points(count: int) -> list[PricePoint]:
    return [
        PricePoint(date=END - timedelta(days=count - i), price=100.0 + i)
        for i in range(count)
    ]


def _keys(chart_data) -> list[set]:
    return [set(p.model_dump(exclude_none=True)) for p in chart_data]


# =============================================================================
# CHART DATA
# =============================================================================


class TestGenerateChartData:
    def test_no_selection_has_only_date_and_price(self):
        data = generate_chart_data(_points(60))
        assert all(keys == {"date", "price"} for keys in _keys(data))

    def test_unselected_indicators_are_not_computed(self, monkeypatch):
        def explode(*args, **kwargs):
            raise AssertionError("sma should not be called")

        monkeypatch.setattr("folio.services.indicators.service.sma", explode)

        data = generate_chart_data(_points(30), IndicatorSelection(ema12=True))

        assert data[-1].ema12 is not None
        assert data[-1].sma20 is None

    def test_sma20_appears_after_warm_up(self):
        data = generate_chart_data(_points(40), IndicatorSelection(sma20=True))
        keys = _keys(data)

        assert all("sma20" not in k for k in keys[:19])
        assert all("sma20" in k for k in keys[19:])
        # Mean of 100..119
        assert data[19].sma20 == 109.5

    def test_macd_fields_follow_warm_up(self):
        data = generate_chart_data(_points(60), IndicatorSelection(macd=True))
        keys = _keys(data)

        assert "macd" not in keys[24]
        assert "macd" in keys[25]
        assert "signal" not in keys[32]
        assert {"macd", "signal", "histogram"} <= keys[33]

    def test_one_record_per_point_with_iso_dates(self):
        points = _points(5)
        data = generate_chart_data(points)

        assert len(data) == 5
        assert data[0].date == "2026-01-26"
        assert data[-1].date == "2026-01-30"
        assert [p.price for p in data] == [p.price for p in points]

    def test_empty_series(self):
        assert generate_chart_data([], IndicatorSelection(sma20=True, macd=True)) == []


# =============================================================================
# STATISTICS
# =============================================================================


class TestCalculateStatistics:
    def test_summary(self):
        stats = calculate_statistics([100, 110, 90, 120], include_volatility=True)

        assert stats.current_price == 120
        assert stats.start_price == 100
        assert stats.min_price == 90
        assert stats.max_price == 120
        assert stats.avg_price == 105
        assert stats.return_percentage == 20.0
        assert stats.volatility == 11.18

    def test_volatility_only_when_requested(self):
        assert calculate_statistics([100, 110]).volatility is None

    def test_negative_return(self):
        assert calculate_statistics([200, 150]).return_percentage == -25.0

    def test_zero_start_price(self):
        assert calculate_statistics([0, 10]).return_percentage == 0.0

    def test_empty(self):
        assert calculate_statistics([]) is None


# =============================================================================
# CHART SERVICE
# =============================================================================


class TestBuildChart:
    @pytest.fixture
    def history(self):
        return generate_mock_price_history(100, 365, 0.02, end=END)

    @pytest.mark.parametrize(
        "date_range, expected",
        [(DateRange.M1, 31), (DateRange.M3, 92), (DateRange.Y1, 365), (DateRange.ALL, 365)],
    )
    def test_range_point_counts(self, history, date_range, expected):
        chart = ChartService().build_chart(
            history, date_range, IndicatorSelection(), now=END
        )
        assert len(chart.chart_data) == expected

    def test_statistics_match_filtered_prices(self, history):
        chart = ChartService().build_chart(
            history, DateRange.M1, IndicatorSelection(), now=END
        )
        prices = [p.price for p in chart.chart_data]

        assert chart.statistics.start_price == prices[0]
        assert chart.statistics.current_price == prices[-1]
        assert chart.statistics.volatility is None

    def test_empty_history(self):
        chart = ChartService().build_chart([], DateRange.ALL, IndicatorSelection(), now=END)
        assert chart.chart_data == []
        assert chart.statistics is None


@pytest.mark.asyncio
async def test_execute_portfolio_has_no_volatility():
    chart = await ChartService().execute(
        ChartRequest(scope=ChartScope.PORTFOLIO, date_range=DateRange.Y1)
    )
    assert len(chart.chart_data) == 365
    assert chart.statistics.volatility is None


@pytest.mark.asyncio
async def test_execute_asset_has_volatility():
    chart = await ChartService().execute(
        ChartRequest(
            scope=ChartScope.ASSET,
            date_range=DateRange.M3,
            indicators=IndicatorSelection(sma20=True),
        )
    )
    assert chart.statistics.volatility is not None
    assert chart.chart_data[-1].sma20 is not None


@pytest.mark.asyncio
async def test_health_check():
    assert await ChartService().health_check() is True


# =============================================================================
# SINGLE INDICATOR
# =============================================================================


class TestComputeIndicator:
    def test_sma_default_period(self):
        response = ChartService().compute_indicator(
            IndicatorRequest(prices=[float(i) for i in range(25)], kind=IndicatorKind.SMA)
        )
        assert response.period == 20
        assert response.values[:19] == [None] * 19
        assert response.values[19] == 9.5

    def test_explicit_period(self):
        response = ChartService().compute_indicator(
            IndicatorRequest(prices=[1, 2, 3, 4], kind=IndicatorKind.EMA, period=2)
        )
        assert response.period == 2
        assert response.values[0] is None
        assert response.values[1:] == pytest.approx([1.5, 2.5, 3.5])

    def test_rsi_is_one_shorter(self):
        response = ChartService().compute_indicator(
            IndicatorRequest(prices=[1, 2, 1, 2], kind=IndicatorKind.RSI, period=2)
        )
        assert response.values == [None, None, 75.0]

    def test_macd_returns_three_lines(self):
        response = ChartService().compute_indicator(
            IndicatorRequest(prices=[float(i) for i in range(40)], kind=IndicatorKind.MACD)
        )
        assert response.values is None
        assert len(response.macd) == len(response.signal) == len(response.histogram) == 40
        assert response.signal[33] is not None


def test_catalogues():
    service = ChartService()
    assert [i.id for i in service.available_indicators()] == [
        "sma20",
        "sma50",
        "ema12",
        "ema26",
        "macd",
    ]
    assert [o.value for o in service.date_range_options()] == list(DateRange)
