"""In-memory latest price per symbol."""

import threading
from typing import Iterable, Optional

from fantasy_finance.domain.models import PriceQuote


class PriceCache:
    """
    Symbol -> latest PriceQuote.

    Written only by the market data refresher. Reads never touch the network
    and return the last successfully fetched value; there is no expiry.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._quotes: dict[str, PriceQuote] = {}

    def update(self, quote: PriceQuote) -> None:
        """Overwrite a single entry."""
        with self._lock:
            self._quotes[quote.symbol] = quote

    def replace_all(self, quotes: Iterable[PriceQuote]) -> None:
        """Replace the whole cache content."""
        fresh = {quote.symbol: quote for quote in quotes}
        with self._lock:
            self._quotes = fresh

    def price_of(self, symbol: str) -> Optional[PriceQuote]:
        with self._lock:
            return self._quotes.get(symbol.strip().upper())

    def all_prices(self) -> dict[str, PriceQuote]:
        with self._lock:
            return dict(self._quotes)
