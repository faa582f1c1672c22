"""Service layer - business logic orchestration."""

from fantasy_finance.services.ledger_service import LedgerService
from fantasy_finance.services.price_cache import PriceCache
from fantasy_finance.services.portfolio_engine import PortfolioEngine, fold_holdings
from fantasy_finance.services.market_data_refresher import MarketDataRefresher

__all__ = [
    "LedgerService",
    "PriceCache",
    "PortfolioEngine",
    "fold_holdings",
    "MarketDataRefresher",
]
