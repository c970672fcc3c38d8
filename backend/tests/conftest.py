from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from folio.schemas.market import PriceQuote, TimeSeriesPoint
from folio.services.cache.price_cache import PriceCache
from folio.services.market_data.interface import (
    ProviderSuccess,
    QuoteProvider,
)
from folio.services.market_data.service import MarketDataService


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider(QuoteProvider):
    """
    QuoteProvider whose calls are AsyncMocks.

    Tests set return_value / side_effect on the *_mock attributes and
    assert on their call counts.
    """

    def __init__(self, configured: bool = True):
        self.configured = configured
        self.quote_mock = AsyncMock(side_effect=lambda symbol: ProviderSuccess(make_quote(symbol)))
        self.rate_mock = AsyncMock(return_value=ProviderSuccess(42500.50))
        self.daily_mock = AsyncMock(return_value=ProviderSuccess(make_series(50)))
        self.intraday_mock = AsyncMock(return_value=ProviderSuccess(make_series(10)))
        self.closed = False

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def get_global_quote(self, symbol):
        return await self.quote_mock(symbol)

    async def get_exchange_rate(self, from_currency, to_currency):
        return await self.rate_mock(from_currency, to_currency)

    async def get_daily_series(self, symbol, output_size=None):
        return await self.daily_mock(symbol, output_size)

    async def get_intraday_series(self, symbol, interval=None):
        return await self.intraday_mock(symbol, interval)

    async def close(self):
        self.closed = True


def make_quote(symbol: str, price: float = 150.25) -> PriceQuote:
    return PriceQuote(
        symbol=symbol.upper(),
        price=price,
        timestamp=datetime(2026, 1, 21, 15, 30, tzinfo=timezone.utc),
        change=2.5,
        change_percent="1.69%",
    )


def make_series(count: int) -> list[TimeSeriesPoint]:
    """Chronological daily candles starting 2026-01-01."""
    return [
        TimeSeriesPoint(
            date=f"2026-{1 + i // 28:02d}-{1 + i % 28:02d}",
            open=100.0 + i,
            high=101.0 + i,
            low=99.0 + i,
            close=100.5 + i,
            volume=1_000_000,
        )
        for i in range(count)
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> PriceCache:
    return PriceCache(ttl_seconds=60.0, clock=clock)


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider()


@pytest.fixture
def service(provider, cache) -> MarketDataService:
    return MarketDataService(provider=provider, cache=cache, default_crypto_market="USD")
