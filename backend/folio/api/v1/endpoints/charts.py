"""
Chart API Endpoints

Performance charts with technical indicator overlays.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from folio.schemas.indicators import (
    ChartRequest,
    ChartScope,
    DateRange,
    DateRangeOption,
    IndicatorInfo,
    IndicatorRequest,
    IndicatorSelection,
    IndicatorSeriesResponse,
    PerformanceChart,
)
from folio.services.indicators import ChartService, get_chart_service

router = APIRouter()


@router.post(
    "/portfolio",
    response_model=PerformanceChart,
    response_model_exclude_none=True,
)
async def get_portfolio_chart(
    date_range: DateRange = DateRange.Y1,
    indicators: Optional[IndicatorSelection] = None,
    service: ChartService = Depends(get_chart_service),
):
    """
    Portfolio performance chart.

    Overlays not selected (or still warming up) are omitted per point.
    """
    request = ChartRequest(
        scope=ChartScope.PORTFOLIO,
        date_range=date_range,
        indicators=indicators or IndicatorSelection(),
    )
    return await service.execute(request)


@router.post(
    "/asset",
    response_model=PerformanceChart,
    response_model_exclude_none=True,
)
async def get_asset_chart(
    date_range: DateRange = DateRange.Y1,
    indicators: Optional[IndicatorSelection] = None,
    service: ChartService = Depends(get_chart_service),
):
    """Single asset performance chart, including price volatility."""
    request = ChartRequest(
        scope=ChartScope.ASSET,
        date_range=date_range,
        indicators=indicators or IndicatorSelection(),
    )
    return await service.execute(request)


@router.post("/compute", response_model=IndicatorSeriesResponse)
async def compute_indicator(
    request: IndicatorRequest,
    service: ChartService = Depends(get_chart_service),
):
    """
    Compute SMA / EMA / RSI / MACD over the given prices.

    Missing values are null; RSI is one entry shorter than the prices.
    """
    return service.compute_indicator(request)


@router.get("/date-ranges", response_model=list[DateRangeOption])
async def get_date_ranges(service: ChartService = Depends(get_chart_service)):
    """Available chart ranges."""
    return service.date_range_options()


@router.get("/indicators", response_model=list[IndicatorInfo])
async def get_available_indicators(service: ChartService = Depends(get_chart_service)):
    """Available chart overlays."""
    return service.available_indicators()
