"""Market data providers module."""

from fantasy_finance.providers.market_data_provider import MarketDataProvider
from fantasy_finance.providers.stub_provider import StubMarketDataProvider
from fantasy_finance.providers.yahoo_provider import YahooMarketDataProvider

__all__ = [
    "MarketDataProvider",
    "StubMarketDataProvider",
    "YahooMarketDataProvider",
]
