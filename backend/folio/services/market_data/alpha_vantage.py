"""
Alpha Vantage Data Adapter

Fetches quotes, exchange rates and time series from Alpha Vantage.
Every failure (missing key, network, timeout, bad payload, unknown symbol)
comes back as ProviderUnavailable with a reason; nothing is raised to callers.
"""

import asyncio
import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import aiohttp
from pydantic import ValidationError

from folio.schemas.market import (
    IntradayInterval,
    OutputSize,
    PriceQuote,
    TimeSeriesPoint,
)
from folio.services.base import ExternalAPIError
from folio.services.market_data.interface import (
    ProviderResult,
    ProviderSuccess,
    ProviderUnavailable,
    QuoteProvider,
    UnavailableReason,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"

# Provider payload keys
GLOBAL_QUOTE_KEY = "Global Quote"
EXCHANGE_RATE_KEY = "Realtime Currency Exchange Rate"
DAILY_SERIES_KEY = "Time Series (Daily)"

# Keys Alpha Vantage uses instead of data when it refuses a request
NOTICE_KEYS = ("Error Message", "Note", "Information")


def _fail(reason: UnavailableReason, message: str) -> ExternalAPIError:
    return ExternalAPIError("AlphaVantage", message, reason=reason)


def _parse_float(value: Any, field: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Bad {field}: {value!r}")
    if not math.isfinite(number):
        raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Bad {field}: {value!r}")
    return number


def _parse_change(value: Any) -> float:
    """Lenient parse for the auxiliary change field; bad values read as 0."""
    try:
        number = float(value or "0")
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        logger.debug(f"Ignoring unparsable change {value!r}")
        return 0.0
    return number


def _notice(payload: dict) -> str:
    for key in NOTICE_KEYS:
        if key in payload:
            return str(payload[key])
    return ""


def _section(payload: dict, key: str, what: str) -> dict:
    section = payload.get(key)
    if not section:
        notice = _notice(payload)
        message = f"No data found for {what}"
        raise _fail(UnavailableReason.NOT_FOUND, f"{message}: {notice}" if notice else message)
    if not isinstance(section, dict):
        raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Unexpected {key!r} payload")
    return section


def parse_global_quote(payload: dict, symbol: str) -> PriceQuote:
    """Parse a GLOBAL_QUOTE response."""
    quote = _section(payload, GLOBAL_QUOTE_KEY, f"symbol {symbol}")
    if not quote.get("05. price"):
        raise _fail(UnavailableReason.NOT_FOUND, f"No price for symbol {symbol}")

    price = _parse_float(quote["05. price"], "price")
    if price < 0:
        raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Negative price {price}")

    return PriceQuote(
        symbol=symbol.upper(),
        price=price,
        timestamp=datetime.now(timezone.utc),
        change=_parse_change(quote.get("09. change")),
        change_percent=str(quote.get("10. change percent") or "0%"),
    )


def parse_exchange_rate(payload: dict, from_currency: str) -> float:
    """Parse a CURRENCY_EXCHANGE_RATE response."""
    rate = _section(payload, EXCHANGE_RATE_KEY, f"crypto {from_currency}")
    if not rate.get("5. Exchange Rate"):
        raise _fail(UnavailableReason.NOT_FOUND, f"No exchange rate for {from_currency}")

    price = _parse_float(rate["5. Exchange Rate"], "exchange rate")
    if price < 0:
        raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Negative rate {price}")
    return price


def parse_time_series(payload: dict, key: str, symbol: str, limit: int) -> list[TimeSeriesPoint]:
    """
    Parse a TIME_SERIES_* response.

    Alpha Vantage lists newest first; the first `limit` entries are kept
    and returned oldest first.
    """
    series = _section(payload, key, f"time series {symbol}")

    points = []
    for date, values in list(series.items())[:limit]:
        if not isinstance(values, dict):
            raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Bad candle for {date}")
        try:
            points.append(
                TimeSeriesPoint(
                    date=date,
                    open=_parse_float(values["1. open"], "open"),
                    high=_parse_float(values["2. high"], "high"),
                    low=_parse_float(values["3. low"], "low"),
                    close=_parse_float(values["4. close"], "close"),
                    volume=int(_parse_float(values["5. volume"], "volume")),
                )
            )
        except KeyError as e:
            raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Missing {e} for {date}")
        except ValidationError as e:
            raise _fail(
                UnavailableReason.MALFORMED_RESPONSE,
                f"Invalid candle for {date}: {e.error_count()} error(s)",
            )

    points.reverse()
    return points


class AlphaVantageClient(QuoteProvider):
    """
    Async Alpha Vantage client.

    One aiohttp session per client, created lazily with a total
    request timeout.
    """

    name = "AlphaVantage"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        series_limit: int = 100,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url
        self._timeout_seconds = timeout_seconds
        self._series_limit = series_limit
        self._session = session
        self._owns_session = session is None

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure we have an active HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_seconds),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def _query(self, params: dict) -> dict:
        """GET the query endpoint and return the JSON body."""
        if not self._api_key:
            raise _fail(UnavailableReason.MISSING_API_KEY, "Alpha Vantage API key not configured")

        session = await self._ensure_session()
        try:
            async with session.get(
                self._base_url, params={**params, "apikey": self._api_key}
            ) as response:
                if response.status != 200:
                    raise _fail(
                        UnavailableReason.HTTP_ERROR,
                        f"Alpha Vantage returned status {response.status}",
                    )
                payload = await response.json(content_type=None)
        except asyncio.TimeoutError:
            raise _fail(UnavailableReason.TIMEOUT, f"Timed out after {self._timeout_seconds}s")
        except aiohttp.ClientError as e:
            raise _fail(UnavailableReason.NETWORK_ERROR, str(e) or type(e).__name__)
        except ValueError as e:
            raise _fail(UnavailableReason.MALFORMED_RESPONSE, f"Invalid JSON: {e}")

        if not isinstance(payload, dict):
            raise _fail(UnavailableReason.MALFORMED_RESPONSE, "Response is not a JSON object")
        return payload

    async def _call(self, params: dict, parse: Callable[[dict], Any]) -> ProviderResult:
        try:
            payload = await self._query(params)
            return ProviderSuccess(parse(payload))
        except ExternalAPIError as e:
            reason = e.reason or UnavailableReason.NETWORK_ERROR
            return ProviderUnavailable(reason=reason, detail=e.message)
        except ValidationError as e:
            return ProviderUnavailable(
                reason=UnavailableReason.MALFORMED_RESPONSE, detail=str(e)
            )

    async def get_global_quote(self, symbol: str) -> ProviderResult[PriceQuote]:
        params = {"function": "GLOBAL_QUOTE", "symbol": symbol.upper()}
        return await self._call(params, lambda payload: parse_global_quote(payload, symbol))

    async def get_exchange_rate(
        self, from_currency: str, to_currency: str
    ) -> ProviderResult[float]:
        params = {
            "function": "CURRENCY_EXCHANGE_RATE",
            "from_currency": from_currency.upper(),
            "to_currency": to_currency.upper(),
        }
        return await self._call(params, lambda payload: parse_exchange_rate(payload, from_currency))

    async def get_daily_series(
        self, symbol: str, output_size: OutputSize = OutputSize.COMPACT
    ) -> ProviderResult[list[TimeSeriesPoint]]:
        params = {
            "function": "TIME_SERIES_DAILY",
            "symbol": symbol.upper(),
            "outputsize": output_size.value,
        }
        return await self._call(
            params,
            lambda payload: parse_time_series(payload, DAILY_SERIES_KEY, symbol, self._series_limit),
        )

    async def get_intraday_series(
        self, symbol: str, interval: IntradayInterval = IntradayInterval.MIN60
    ) -> ProviderResult[list[TimeSeriesPoint]]:
        params = {
            "function": "TIME_SERIES_INTRADAY",
            "symbol": symbol.upper(),
            "interval": interval.value,
        }
        key = f"Time Series ({interval.value})"
        return await self._call(
            params,
            lambda payload: parse_time_series(payload, key, symbol, self._series_limit),
        )
