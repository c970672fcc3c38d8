"""
Market Data Service

CONTRACT:
    Input:  symbols / holdings
    Output: PriceQuote (or None), TimeSeriesPoint lists

RESPONSIBILITIES:
    - Fetch quotes and exchange rates from Alpha Vantage
    - Cache live prices for a short freshness window
    - Turn every upstream failure into "no data"
    - Generate synthetic price history for demo charts
"""

from folio.services.market_data.interface import (
    MarketDataServiceInterface,
    ProviderSuccess,
    ProviderUnavailable,
    QuoteProvider,
    UnavailableReason,
)
from folio.services.market_data.alpha_vantage import AlphaVantageClient
from folio.services.market_data.service import (
    MarketDataService,
    close_market_data_service,
    get_market_data_service,
)

__all__ = [
    "MarketDataServiceInterface",
    "ProviderSuccess",
    "ProviderUnavailable",
    "QuoteProvider",
    "UnavailableReason",
    "AlphaVantageClient",
    "MarketDataService",
    "close_market_data_service",
    "get_market_data_service",
]
