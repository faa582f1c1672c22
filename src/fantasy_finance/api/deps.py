"""Dependency injection for FastAPI."""

from fastapi import Request

from fantasy_finance.app_context import AppContext
from fantasy_finance.services import (
    LedgerService,
    MarketDataRefresher,
    PortfolioEngine,
    PriceCache,
)


def get_app_context(request: Request) -> AppContext:
    """Provide the AppContext attached to the running app."""
    return request.app.state.context


def get_ledger_service(request: Request) -> LedgerService:
    """Provide LedgerService instance."""
    return get_app_context(request).ledger


def get_portfolio_engine(request: Request) -> PortfolioEngine:
    """Provide PortfolioEngine instance."""
    return get_app_context(request).portfolio


def get_price_cache(request: Request) -> PriceCache:
    """Provide PriceCache instance."""
    return get_app_context(request).price_cache


def get_refresher(request: Request) -> MarketDataRefresher:
    """Provide MarketDataRefresher instance."""
    return get_app_context(request).refresher
