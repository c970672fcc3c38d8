"""
Market Data API Endpoints

Endpoints for live prices and price history.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query

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
from folio.services.market_data import MarketDataService, get_market_data_service

router = APIRouter()

# Letters, digits and class-share dots (BRK.B); "-" is reserved for crypto pairs
STOCK_SYMBOL_PATTERN = r"^[A-Za-z0-9.]+$"


@router.get("/stock/{symbol}", response_model=PriceQuote)
async def get_stock_price(
    symbol: str = Path(..., min_length=1, max_length=10, pattern=STOCK_SYMBOL_PATTERN),
    service: MarketDataService = Depends(get_market_data_service),
):
    """
    Get the live price for a stock or fund.

    Served from cache when fetched within the last minute.
    """
    quote = await service.fetch(symbol)
    if quote is None:
        raise HTTPException(status_code=404, detail=f"Price not available for {symbol}")
    return quote


@router.get("/crypto/{symbol}", response_model=PriceQuote)
async def get_crypto_price(
    symbol: str = Path(..., min_length=1, max_length=10),
    market: str = Query(default="USD", min_length=1, max_length=10),
    service: MarketDataService = Depends(get_market_data_service),
):
    """Get the live price of a cryptocurrency in `market`."""
    quote = await service.fetch_crypto(symbol, market)
    if quote is None:
        raise HTTPException(
            status_code=404, detail=f"Price not available for {symbol}/{market}"
        )
    return quote


@router.get("/batch", response_model=list[PriceQuote])
async def get_stock_prices_batch(
    symbols: str = Query(..., description="Comma-separated symbols"),
    service: MarketDataService = Depends(get_market_data_service),
):
    """
    Get live prices for up to 20 symbols.

    Symbols without a price are left out.
    """
    symbol_list = [s.strip().upper() for s in symbols.split(",") if s.strip()]
    if not symbol_list or len(symbol_list) > 20:
        raise HTTPException(status_code=422, detail="Provide between 1 and 20 symbols")
    return await service.fetch_batch(symbol_list)


@router.post("/holdings/prices", response_model=list[PriceQuote])
async def get_holdings_prices(
    request: HoldingPricesRequest,
    service: MarketDataService = Depends(get_market_data_service),
):
    """Live prices for portfolio holdings (crypto priced in USD)."""
    return await service.execute(request)


@router.get("/timeseries/{symbol}", response_model=list[TimeSeriesPoint])
async def get_stock_time_series(
    symbol: str = Path(..., min_length=1, max_length=10),
    output_size: OutputSize = OutputSize.COMPACT,
    service: MarketDataService = Depends(get_market_data_service),
):
    """Daily candles, oldest first (at most 100)."""
    series = await service.get_time_series(symbol, output_size)
    if series is None:
        raise HTTPException(status_code=404, detail=f"Time series not available for {symbol}")
    return series


@router.get("/intraday/{symbol}", response_model=list[TimeSeriesPoint])
async def get_stock_intraday(
    symbol: str = Path(..., min_length=1, max_length=10),
    interval: IntradayInterval = IntradayInterval.MIN60,
    service: MarketDataService = Depends(get_market_data_service),
):
    """Intraday candles, oldest first (at most 100)."""
    series = await service.get_intraday_series(symbol, interval)
    if series is None:
        raise HTTPException(status_code=404, detail=f"Intraday data not available for {symbol}")
    return series


@router.get("/holdings/{symbol}/history", response_model=HoldingHistory)
async def get_holding_history(
    symbol: str = Path(..., min_length=1, max_length=10),
    holding_type: HoldingType = HoldingType.STOCK,
    days: int = Query(default=30, ge=1, le=365),
    service: MarketDataService = Depends(get_market_data_service),
):
    """Recent daily history for a stock or fund holding."""
    history = await service.get_holding_history(symbol, holding_type, days)
    if history is None:
        raise HTTPException(status_code=404, detail=f"History not available for {symbol}")
    return history


@router.get("/cache/stats", response_model=CacheStats)
async def get_cache_stats(
    service: MarketDataService = Depends(get_market_data_service),
):
    """Quote cache size and keys."""
    return service.cache_stats()
