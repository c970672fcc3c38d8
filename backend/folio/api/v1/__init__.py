"""
API v1 Router

All API endpoints for the frontend.
"""

from fastapi import APIRouter

from folio.api.v1.endpoints import market, charts

router = APIRouter()

# Include all endpoint routers
router.include_router(market.router, prefix="/market", tags=["Market Data"])
router.include_router(charts.router, prefix="/charts", tags=["Charts"])
