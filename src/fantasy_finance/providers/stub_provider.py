"""Stub market data provider for offline/testing use."""

import random
from datetime import date
from decimal import Decimal

# Deterministic fake (last price, previous close) for common symbols
_STUB_PRICES: dict[str, tuple[Decimal, Decimal]] = {
    "AAPL": (Decimal("185.50"), Decimal("184.25")),
    "GOOGL": (Decimal("142.75"), Decimal("141.50")),
    "MSFT": (Decimal("378.25"), Decimal("376.80")),
    "AMZN": (Decimal("178.50"), Decimal("177.25")),
    "TSLA": (Decimal("248.75"), Decimal("250.10")),
    "NVDA": (Decimal("485.25"), Decimal("482.50")),
    "META": (Decimal("505.50"), Decimal("502.75")),
    "SPY": (Decimal("485.25"), Decimal("484.10")),
    "QQQ": (Decimal("418.75"), Decimal("417.50")),
    "VTI": (Decimal("252.30"), Decimal("251.80")),
}


class StubMarketDataProvider:
    """
    Stub provider with deterministic fake data for offline operation.

    Uses predefined prices for common symbols; unknown symbols get a price
    derived from a seeded generator, fixed on first request.
    """

    def __init__(self, seed: int = 42):
        """Initialize with optional random seed for reproducibility."""
        self._rng = random.Random(seed)
        self._generated: dict[str, tuple[Decimal, Decimal]] = {}

    def latest_price(self, symbol: str) -> Decimal:
        """Return the stub last price."""
        return self._prices_for(symbol)[0]

    def close_price(self, symbol: str, day: date) -> Decimal:
        """Return the stub previous close, whatever the day."""
        return self._prices_for(symbol)[1]

    def _prices_for(self, symbol: str) -> tuple[Decimal, Decimal]:
        upper_symbol = symbol.upper()
        if upper_symbol in _STUB_PRICES:
            return _STUB_PRICES[upper_symbol]
        if upper_symbol not in self._generated:
            base_price = Decimal(str(50 + self._rng.random() * 200))
            last_price = base_price.quantize(Decimal("0.01"))
            change_pct = Decimal(str((self._rng.random() - 0.5) * 0.04))
            prev_close = (last_price / (1 + change_pct)).quantize(Decimal("0.01"))
            self._generated[upper_symbol] = (last_price, prev_close)
        return self._generated[upper_symbol]
