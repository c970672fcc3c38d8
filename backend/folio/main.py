"""
Folio Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from folio.core.config import settings
from folio.api.v1 import router as api_v1_router
from folio.services.indicators import ChartService, get_chart_service
from folio.services.market_data import (
    MarketDataService,
    close_market_data_service,
    get_market_data_service,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")
    if not settings.alpha_vantage_api_key:
        logger.warning("Alpha Vantage API key not configured - live prices unavailable")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_market_data_service()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Folio Portfolio Tracker API

    ## Architecture
    - **Market Data**: Live stock, fund and crypto prices (Alpha Vantage, cached)
    - **Indicator Engine**: SMA, EMA, MACD, RSI (pure Python/NumPy)
    - **Charts**: Performance charts with indicator overlays and statistics
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Frontend origin first, then any extra configured origins
cors_origins = list(dict.fromkeys([settings.frontend_url, *settings.allowed_origins]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check(
    market_data: MarketDataService = Depends(get_market_data_service),
    charts: ChartService = Depends(get_chart_service),
):
    """
    Liveness plus per-service readiness.

    The app stays "healthy" without an API key; market_data is then
    reported as unavailable and live prices come back as 404.
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "services": {
            "market_data": await market_data.health_check(),
            "charts": await charts.health_check(),
        },
    }


@app.get("/")
async def root():
    return {
        "message": f"{settings.app_name} API",
        "docs": "/docs",
        "health": "/health",
    }
