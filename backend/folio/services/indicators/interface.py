"""
Chart Service Interface

Defines the contract for the indicator / chart layer.
"""

from abc import abstractmethod

from folio.services.base import BaseService
from folio.schemas.indicators import (
    ChartRequest,
    IndicatorRequest,
    IndicatorSeriesResponse,
    PerformanceChart,
)


class ChartServiceInterface(BaseService[ChartRequest, PerformanceChart]):
    """
    Chart Service Contract.

    INPUT: ChartRequest
        - scope: portfolio or single asset
        - date_range: 1M / 3M / 6M / 1Y / ALL
        - indicators: overlays to include

    OUTPUT: PerformanceChart
        - chart_data: per-date price plus selected overlays
        - statistics: summary of the charted prices
    """

    @property
    def name(self) -> str:
        return "ChartService"

    @abstractmethod
    async def execute(self, input_data: ChartRequest) -> PerformanceChart:
        """Build the chart bundle."""
        pass

    @abstractmethod
    def compute_indicator(self, request: IndicatorRequest) -> IndicatorSeriesResponse:
        """
        Compute a single indicator series.

        Args:
            request: prices, indicator kind and windows

        Returns:
            Series aligned with the prices (RSI is one shorter)
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Chart service is always healthy (pure computation)."""
        pass
