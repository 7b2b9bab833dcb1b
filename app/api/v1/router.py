"""
Version 1 API router.

Collects the router of every bounded context under one prefix.
"""

from fastapi import APIRouter

from app.interfaces.accounts.router import router as auth_router
from app.interfaces.accounts.user_router import broker_router, router as user_router
from app.interfaces.health import router as health_router
from app.interfaces.strategy.automation_router import router as automation_router
from app.interfaces.strategy.router import router as ai_router
from app.interfaces.trading.market_router import router as market_router
from app.interfaces.trading.router import router as trades_router

API_V1_PREFIX = "/api/v1"

router = APIRouter(prefix=API_V1_PREFIX)

for _router in (
    health_router,
    auth_router,
    user_router,
    broker_router,
    trades_router,
    market_router,
    ai_router,
    automation_router,
):
    router.include_router(_router)
