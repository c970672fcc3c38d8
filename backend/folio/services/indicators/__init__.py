"""
Indicator Engine

CONTRACT:
    Input:  price series (+ overlay selection)
    Output: indicator series / PerformanceChart

RESPONSIBILITIES:
    - Calculate SMA, EMA, MACD and RSI over price series
    - Assemble chart data with the selected overlays
    - Summarise charted prices (return, range, volatility)

Uses NumPy for calculations.
All math is deterministic and reproducible.
"""

from folio.services.indicators.interface import ChartServiceInterface
from folio.services.indicators.service import (
    ChartService,
    calculate_statistics,
    generate_chart_data,
    get_chart_service,
)

__all__ = [
    "ChartServiceInterface",
    "ChartService",
    "calculate_statistics",
    "generate_chart_data",
    "get_chart_service",
]
