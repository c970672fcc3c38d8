"""
Market Data Service Implementation

Live prices for stocks, funds and crypto, fronted by the price cache.
Primary: Alpha Vantage
Fallback: none - an unavailable price is returned as None
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional

from folio.core.config import settings
from folio.schemas.market import (
    CacheStats,
    HoldingHistory,
    HoldingPricesRequest,
    HoldingRef,
    HoldingType,
    IntradayInterval,
    OutputSize,
    PriceQuote,
    TimeSeriesPoint,
)
from folio.services.cache.price_cache import (
    PAIR_SEPARATOR,
    PriceCache,
    crypto_key,
    stock_key,
)
from folio.services.market_data.alpha_vantage import AlphaVantageClient
from folio.services.market_data.interface import (
    MarketDataServiceInterface,
    ProviderResult,
    ProviderUnavailable,
    QuoteProvider,
    UnavailableReason,
)

logger = logging.getLogger(__name__)


class MarketDataService(MarketDataServiceInterface):
    """
    Market Data Service.

    Quotes are cached per key for the cache TTL. Concurrent misses on the
    same key share a single upstream request.
    """

    def __init__(
        self,
        provider: QuoteProvider,
        cache: Optional[PriceCache] = None,
        default_crypto_market: str = "USD",
    ):
        self._provider = provider
        self._cache = cache if cache is not None else PriceCache()
        self._default_crypto_market = default_crypto_market
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def name(self) -> str:
        return "MarketDataService"

    @property
    def cache(self) -> PriceCache:
        return self._cache

    # ============ Provider helpers ============

    def _log_unavailable(self, what: str, outcome: ProviderUnavailable) -> None:
        if outcome.reason in (UnavailableReason.MISSING_API_KEY, UnavailableReason.NOT_FOUND):
            logger.warning(f"No data for {what} ({outcome.reason.value}): {outcome.detail}")
        else:
            logger.error(f"Error fetching {what} ({outcome.reason.value}): {outcome.detail}")

    async def _call_provider(
        self, what: str, call: Callable[[], Awaitable[ProviderResult]]
    ) -> Optional[object]:
        """Run a provider call; any failure becomes None."""
        try:
            outcome = await call()
        except Exception as e:
            logger.error(f"Unexpected provider failure for {what}: {e}")
            return None

        if isinstance(outcome, ProviderUnavailable):
            self._log_unavailable(what, outcome)
            return None
        return outcome.value

    async def _single_flight(
        self, key: str, load: Callable[[], Awaitable[Optional[PriceQuote]]]
    ) -> Optional[PriceQuote]:
        """Share one in-flight load per key between concurrent callers."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(load())
            self._inflight[key] = task

            def _forget(done: asyncio.Task) -> None:
                if self._inflight.get(key) is done:
                    del self._inflight[key]

            task.add_done_callback(_forget)
        return await asyncio.shield(task)

    def _cached_quote(self, key: str) -> Optional[PriceQuote]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        logger.debug(f"Cache hit for {key}")
        return PriceQuote(symbol=entry.symbol, price=entry.price, timestamp=entry.fetched_at)

    # ============ Live prices ============

    async def fetch(self, symbol: str) -> Optional[PriceQuote]:
        """Live stock / fund price. None when unavailable."""
        if PAIR_SEPARATOR in symbol:
            # Would read a crypto pair entry from the shared key space
            logger.warning(
                f"Rejected stock symbol {symbol!r}: '{PAIR_SEPARATOR}' is reserved for pairs"
            )
            return None

        key = stock_key(symbol)
        cached = self._cached_quote(key)
        if cached is not None:
            return cached

        async def load() -> Optional[PriceQuote]:
            quote = await self._call_provider(
                f"symbol {key}", lambda: self._provider.get_global_quote(key)
            )
            if quote is None:
                return None
            self._cache.set(key, quote.symbol, quote.price, fetched_at=quote.timestamp)
            return quote

        return await self._single_flight(key, load)

    async def fetch_crypto(
        self, symbol: str, market: str = "USD"
    ) -> Optional[PriceQuote]:
        """Live crypto price quoted in `market`. None when unavailable."""
        key = crypto_key(symbol, market)
        cached = self._cached_quote(key)
        if cached is not None:
            return cached

        pair = f"{symbol.upper()}/{market.upper()}"

        async def load() -> Optional[PriceQuote]:
            rate = await self._call_provider(
                f"crypto {pair}",
                lambda: self._provider.get_exchange_rate(symbol.upper(), market.upper()),
            )
            if rate is None:
                return None
            entry = self._cache.set(key, pair, rate)
            return PriceQuote(symbol=pair, price=rate, timestamp=entry.fetched_at)

        return await self._single_flight(key, load)

    async def fetch_batch(self, symbols: list[str]) -> list[PriceQuote]:
        """Quotes for every symbol that resolved, in request order."""
        results = await asyncio.gather(*(self.fetch(symbol) for symbol in symbols))
        return [quote for quote in results if quote is not None]

    async def _fetch_holding(self, holding: HoldingRef) -> Optional[PriceQuote]:
        if holding.type == HoldingType.CRYPTO:
            return await self.fetch_crypto(holding.symbol, self._default_crypto_market)
        # Stocks and funds use the same endpoint
        return await self.fetch(holding.symbol)

    async def execute(self, input_data: HoldingPricesRequest) -> list[PriceQuote]:
        """Live prices for holdings; unresolved holdings are dropped."""
        results = await asyncio.gather(
            *(self._fetch_holding(holding) for holding in input_data.holdings)
        )
        return [quote for quote in results if quote is not None]

    # ============ Time series ============

    async def get_time_series(
        self, symbol: str, output_size: OutputSize = OutputSize.COMPACT
    ) -> Optional[list[TimeSeriesPoint]]:
        """Daily candles, oldest first. Not cached."""
        return await self._call_provider(
            f"time series {symbol.upper()}",
            lambda: self._provider.get_daily_series(symbol, output_size),
        )

    async def get_intraday_series(
        self, symbol: str, interval: IntradayInterval = IntradayInterval.MIN60
    ) -> Optional[list[TimeSeriesPoint]]:
        """Intraday candles, oldest first. Not cached."""
        return await self._call_provider(
            f"intraday {symbol.upper()} {interval.value}",
            lambda: self._provider.get_intraday_series(symbol, interval),
        )

    async def get_holding_history(
        self, symbol: str, holding_type: HoldingType, days: int = 30
    ) -> Optional[HoldingHistory]:
        """Most recent `days` daily candles. Crypto has no daily history source."""
        if holding_type == HoldingType.CRYPTO:
            return None

        series = await self.get_time_series(symbol, OutputSize.COMPACT)
        if series is None:
            return None

        recent = series[-days:] if days > 0 else []
        return HoldingHistory(
            symbol=symbol.upper(),
            type=holding_type,
            data=recent,
            count=len(recent),
        )

    # ============ Cache management ============

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    async def health_check(self) -> bool:
        return self._provider.is_configured

    async def close(self) -> None:
        await self._provider.close()


_service_instance: Optional[MarketDataService] = None


def get_market_data_service() -> MarketDataService:
    """Get or create the application's market data service."""
    global _service_instance
    if _service_instance is None:
        provider = AlphaVantageClient(
            api_key=settings.alpha_vantage_api_key,
            base_url=settings.alpha_vantage_base_url,
            timeout_seconds=settings.request_timeout_seconds,
            series_limit=settings.time_series_limit,
        )
        _service_instance = MarketDataService(
            provider=provider,
            cache=PriceCache(ttl_seconds=settings.quote_cache_ttl_seconds),
            default_crypto_market=settings.default_crypto_market,
        )
    return _service_instance


async def close_market_data_service() -> None:
    """Release the application's service, if one was created."""
    global _service_instance
    if _service_instance is not None:
        await _service_instance.close()
        _service_instance = None
