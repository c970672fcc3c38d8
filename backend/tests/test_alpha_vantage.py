"""
Alpha Vantage adapter tests.

The aiohttp session is replaced by a small fake that replays canned
responses and records request params.
"""

import asyncio

import aiohttp
import pytest

from folio.schemas.market import IntradayInterval
from folio.services.market_data.alpha_vantage import AlphaVantageClient
from folio.services.market_data.interface import (
    ProviderSuccess,
    ProviderUnavailable,
    UnavailableReason,
)

pytestmark = pytest.mark.asyncio


class _FakeResponse:
    def __init__(self, payload, status: int = 200):
        self._payload = payload
        self.status = status

    async def json(self, content_type=None):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class _FakeSession:
    """Replays (payload, status) pairs or raises queued exceptions."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []
        self.closed = False

    def get(self, url, params=None):
        self.calls.append(params)
        item = self._responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        payload, status = item if isinstance(item, tuple) else (item, 200)
        return _FakeResponse(payload, status)

    async def close(self):
        self.closed = True


def _client(session, api_key="test-key", **kwargs) -> AlphaVantageClient:
    return AlphaVantageClient(api_key=api_key, session=session, **kwargs)


def _daily(count: int) -> dict:
    """Newest-first daily payload for January/February 2026."""
    series = {}
    for i in reversed(range(count)):
        date = f"2026-{1 + i // 28:02d}-{1 + i % 28:02d}"
        series[date] = {
            "1. open": "150.00",
            "2. high": "152.00",
            "3. low": "149.50",
            "4. close": f"{150 + i}.50",
            "5. volume": "1000000",
        }
    return {"Time Series (Daily)": series}


# =============================================================================
# GLOBAL QUOTE
# =============================================================================


async def test_global_quote_success():
    session = _FakeSession(
        {
            "Global Quote": {
                "05. price": "150.25",
                "09. change": "2.50",
                "10. change percent": "1.69%",
            }
        }
    )

    outcome = await _client(session).get_global_quote("aapl")

    assert isinstance(outcome, ProviderSuccess)
    assert outcome.value.symbol == "AAPL"
    assert outcome.value.price == 150.25
    assert outcome.value.change == 2.5
    assert outcome.value.change_percent == "1.69%"
    assert session.calls == [
        {"function": "GLOBAL_QUOTE", "symbol": "AAPL", "apikey": "test-key"}
    ]


async def test_missing_api_key_skips_request():
    session = _FakeSession()

    outcome = await _client(session, api_key=None).get_global_quote("AAPL")

    assert outcome == ProviderUnavailable(
        reason=UnavailableReason.MISSING_API_KEY,
        detail="Alpha Vantage API key not configured",
    )
    assert session.calls == []


async def test_empty_quote_is_not_found():
    outcome = await _client(_FakeSession({"Global Quote": {}})).get_global_quote("INVALID")
    assert outcome.reason == UnavailableReason.NOT_FOUND


async def test_rate_limit_note_is_not_found_with_detail():
    session = _FakeSession({"Note": "Thank you for using Alpha Vantage!"})

    outcome = await _client(session).get_global_quote("AAPL")

    assert outcome.reason == UnavailableReason.NOT_FOUND
    assert "Thank you for using Alpha Vantage!" in outcome.detail


async def test_unparsable_price_is_malformed():
    session = _FakeSession({"Global Quote": {"05. price": "n/a"}})
    outcome = await _client(session).get_global_quote("AAPL")
    assert outcome.reason == UnavailableReason.MALFORMED_RESPONSE


async def test_missing_change_fields_default():
    session = _FakeSession({"Global Quote": {"05. price": "10"}})

    outcome = await _client(session).get_global_quote("AAPL")

    assert outcome.value.change == 0.0
    assert outcome.value.change_percent == "0%"


@pytest.mark.parametrize("change", ["N/A", "nan", ""])
async def test_bad_change_keeps_price(change):
    session = _FakeSession({"Global Quote": {"05. price": "150.25", "09. change": change}})

    outcome = await _client(session).get_global_quote("AAPL")

    assert isinstance(outcome, ProviderSuccess)
    assert outcome.value.price == 150.25
    assert outcome.value.change == 0.0


async def test_network_error():
    session = _FakeSession(aiohttp.ClientConnectionError("Network error"))
    outcome = await _client(session).get_global_quote("AAPL")
    assert outcome.reason == UnavailableReason.NETWORK_ERROR


async def test_timeout():
    session = _FakeSession(asyncio.TimeoutError())
    outcome = await _client(session).get_global_quote("AAPL")
    assert outcome.reason == UnavailableReason.TIMEOUT


async def test_http_error_status():
    session = _FakeSession(({"Global Quote": {"05. price": "1"}}, 503))
    outcome = await _client(session).get_global_quote("AAPL")
    assert outcome.reason == UnavailableReason.HTTP_ERROR


async def test_invalid_json():
    session = _FakeSession(ValueError("Expecting value"))
    outcome = await _client(session).get_global_quote("AAPL")
    assert outcome.reason == UnavailableReason.MALFORMED_RESPONSE


async def test_non_object_json():
    outcome = await _client(_FakeSession(["unexpected"])).get_global_quote("AAPL")
    assert outcome.reason == UnavailableReason.MALFORMED_RESPONSE


# =============================================================================
# EXCHANGE RATE
# =============================================================================


async def test_exchange_rate_success():
    session = _FakeSession(
        {"Realtime Currency Exchange Rate": {"5. Exchange Rate": "42500.50"}}
    )

    outcome = await _client(session).get_exchange_rate("btc", "usd")

    assert outcome == ProviderSuccess(42500.50)
    assert session.calls[0]["function"] == "CURRENCY_EXCHANGE_RATE"
    assert session.calls[0]["from_currency"] == "BTC"
    assert session.calls[0]["to_currency"] == "USD"


async def test_exchange_rate_missing():
    session = _FakeSession({"Realtime Currency Exchange Rate": {}})
    outcome = await _client(session).get_exchange_rate("INVALID", "USD")
    assert outcome.reason == UnavailableReason.NOT_FOUND


# =============================================================================
# TIME SERIES
# =============================================================================


async def test_daily_series_is_chronological():
    session = _FakeSession(
        {
            "Time Series (Daily)": {
                "2026-01-21": {
                    "1. open": "150.00",
                    "2. high": "152.00",
                    "3. low": "149.50",
                    "4. close": "151.50",
                    "5. volume": "1000000",
                },
                "2026-01-20": {
                    "1. open": "148.00",
                    "2. high": "150.00",
                    "3. low": "147.50",
                    "4. close": "150.00",
                    "5. volume": "950000",
                },
            }
        }
    )

    outcome = await _client(session).get_daily_series("AAPL")

    points = outcome.value
    assert [p.date for p in points] == ["2026-01-20", "2026-01-21"]
    assert points[0].close == 150.0
    assert points[1].close == 151.5
    assert points[1].volume == 1_000_000
    assert session.calls[0]["outputsize"] == "compact"


async def test_daily_series_keeps_most_recent_limit():
    outcome = await _client(_FakeSession(_daily(56)), series_limit=10).get_daily_series("AAPL")

    points = outcome.value
    assert len(points) == 10
    # Newest 10 of 56, oldest first
    assert points[0].close == 196.5
    assert points[-1].close == 205.5


async def test_daily_series_missing():
    outcome = await _client(_FakeSession({})).get_daily_series("INVALID")
    assert outcome.reason == UnavailableReason.NOT_FOUND


async def test_daily_series_bad_candle():
    session = _FakeSession({"Time Series (Daily)": {"2026-01-21": {"1. open": "1"}}})
    outcome = await _client(session).get_daily_series("AAPL")
    assert outcome.reason == UnavailableReason.MALFORMED_RESPONSE


async def test_negative_volume_is_malformed():
    payload = _daily(2)
    payload["Time Series (Daily)"]["2026-01-01"]["5. volume"] = "-5"

    outcome = await _client(_FakeSession(payload)).get_daily_series("AAPL")

    assert outcome.reason == UnavailableReason.MALFORMED_RESPONSE
    assert "2026-01-01" in outcome.detail


async def test_non_string_change_percent_is_accepted():
    session = _FakeSession({"Global Quote": {"05. price": "10", "10. change percent": 1.5}})
    outcome = await _client(session).get_global_quote("AAPL")
    assert outcome.value.change_percent == "1.5"


async def test_intraday_series_uses_interval_key():
    payload = _daily(3)
    session = _FakeSession({"Time Series (15min)": payload["Time Series (Daily)"]})

    outcome = await _client(session).get_intraday_series("AAPL", IntradayInterval.MIN15)

    assert len(outcome.value) == 3
    assert session.calls[0]["function"] == "TIME_SERIES_INTRADAY"
    assert session.calls[0]["interval"] == "15min"


# =============================================================================
# SESSION
# =============================================================================


async def test_close_leaves_injected_session_open():
    session = _FakeSession()
    client = _client(session)

    await client.close()

    assert session.closed is False


async def test_is_configured():
    assert AlphaVantageClient(api_key="k").is_configured
    assert not AlphaVantageClient(api_key=None).is_configured
