"""API routers package."""

from fantasy_finance.api.routers.transactions import router as transactions_router
from fantasy_finance.api.routers.activities import router as activities_router
from fantasy_finance.api.routers.holdings import router as holdings_router
from fantasy_finance.api.routers.market import router as market_router

__all__ = [
    "transactions_router",
    "activities_router",
    "holdings_router",
    "market_router",
]
