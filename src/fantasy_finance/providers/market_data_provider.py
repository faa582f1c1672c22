"""Market data provider protocol."""

from datetime import date
from decimal import Decimal
from typing import Protocol


class MarketDataProvider(Protocol):
    """
    Protocol for market data providers.

    Both calls may block on the network and may raise ProviderError (or any
    other exception); callers bound them with a timeout.
    """

    def latest_price(self, symbol: str) -> Decimal:
        """Return the latest traded price for a symbol."""
        ...

    def close_price(self, symbol: str, day: date) -> Decimal:
        """Return the closing price of a symbol on a given trading day."""
        ...
