"""
Market Data Service Interface

Defines the contract for the live price layer and for the upstream
quote provider it wraps.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from folio.services.base import BaseService
from folio.schemas.market import (
    CacheStats,
    HoldingHistory,
    HoldingPricesRequest,
    HoldingType,
    IntradayInterval,
    OutputSize,
    PriceQuote,
    TimeSeriesPoint,
)

T = TypeVar("T")


# =============================================================================
# PROVIDER OUTCOMES
# =============================================================================


class UnavailableReason(str, Enum):
    MISSING_API_KEY = "missing_api_key"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    HTTP_ERROR = "http_error"
    MALFORMED_RESPONSE = "malformed_response"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ProviderSuccess(Generic[T]):
    value: T


@dataclass(frozen=True)
class ProviderUnavailable:
    """No data. The reason is for logging only."""

    reason: UnavailableReason
    detail: str = ""


ProviderResult = Union[ProviderSuccess[T], ProviderUnavailable]


class QuoteProvider(ABC):
    """
    Upstream market data source.

    Implementations never raise for upstream failures; they return
    ProviderUnavailable instead.
    """

    @abstractmethod
    async def get_global_quote(self, symbol: str) -> ProviderResult[PriceQuote]:
        """Latest stock / fund quote."""
        pass

    @abstractmethod
    async def get_exchange_rate(
        self, from_currency: str, to_currency: str
    ) -> ProviderResult[float]:
        """Realtime exchange rate (crypto or fiat)."""
        pass

    @abstractmethod
    async def get_daily_series(
        self, symbol: str, output_size: OutputSize = OutputSize.COMPACT
    ) -> ProviderResult[list[TimeSeriesPoint]]:
        """Daily candles in chronological order."""
        pass

    @abstractmethod
    async def get_intraday_series(
        self, symbol: str, interval: IntradayInterval = IntradayInterval.MIN60
    ) -> ProviderResult[list[TimeSeriesPoint]]:
        """Intraday candles in chronological order."""
        pass

    @property
    def is_configured(self) -> bool:
        return True

    async def close(self) -> None:
        """Release network resources."""
        return None


# =============================================================================
# SERVICE CONTRACT
# =============================================================================


class MarketDataServiceInterface(BaseService[HoldingPricesRequest, list[PriceQuote]]):
    """
    Market Data Service Contract.

    INPUT: HoldingPricesRequest
        - holdings: symbols with their asset type

    OUTPUT: list[PriceQuote]
        - One quote per holding that resolved; failures are dropped
    """

    @property
    def name(self) -> str:
        return "MarketDataService"

    @abstractmethod
    async def execute(self, input_data: HoldingPricesRequest) -> list[PriceQuote]:
        """Live prices for a set of holdings."""
        pass

    @abstractmethod
    async def fetch(self, symbol: str) -> Optional[PriceQuote]:
        """Live stock / fund price, possibly from cache. None when unavailable."""
        pass

    @abstractmethod
    async def fetch_crypto(
        self, symbol: str, market: str = "USD"
    ) -> Optional[PriceQuote]:
        """Live crypto price in `market`, possibly from cache. None when unavailable."""
        pass

    @abstractmethod
    async def get_time_series(
        self, symbol: str, output_size: OutputSize = OutputSize.COMPACT
    ) -> Optional[list[TimeSeriesPoint]]:
        pass

    @abstractmethod
    async def get_holding_history(
        self, symbol: str, holding_type: HoldingType, days: int = 30
    ) -> Optional[HoldingHistory]:
        pass

    @abstractmethod
    def clear_cache(self) -> None:
        pass

    @abstractmethod
    def cache_stats(self) -> CacheStats:
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether the upstream provider is usable."""
        pass
