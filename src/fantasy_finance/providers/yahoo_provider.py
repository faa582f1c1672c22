"""
Yahoo Finance provider via yfinance.

Both calls go through ``Ticker.history`` so every HTTP request carries a
timeout; the refresher additionally bounds each call on its worker pool.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

import yfinance as yf

from fantasy_finance.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0


def _to_price(symbol: str, value) -> Decimal:
    try:
        price = Decimal(str(float(value)))
    except (TypeError, ValueError) as exc:
        raise ProviderError(symbol, f"invalid price {value!r}") from exc
    if not price.is_finite() or price <= 0:
        raise ProviderError(symbol, f"invalid price {value!r}")
    return price


class YahooMarketDataProvider:
    """Yahoo Finance-backed latest price and daily close provider."""

    def __init__(self, timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS):
        self._timeout = timeout_seconds

    def latest_price(self, symbol: str) -> Decimal:
        """Return the Close of the most recent daily bar (live during market hours)."""
        frame = self._history(symbol, period="5d")
        if frame is None or frame.empty:
            raise ProviderError(symbol, "no recent daily bars")
        return _to_price(symbol, frame.iloc[-1]["Close"])

    def close_price(self, symbol: str, day: date) -> Decimal:
        """Return the unadjusted Close for ``day``."""
        frame = self._history(
            symbol,
            start=day.isoformat(),
            end=(day + timedelta(days=1)).isoformat(),
        )
        if frame is None or frame.empty:
            raise ProviderError(symbol, f"no daily bar for {day.isoformat()}")
        row = frame.iloc[-1]
        logger.debug("yfinance close for %s on %s: %s", symbol, day, row["Close"])
        return _to_price(symbol, row["Close"])

    def _history(self, symbol: str, **window):
        try:
            return yf.Ticker(symbol).history(
                interval="1d",
                auto_adjust=False,
                timeout=self._timeout,
                **window,
            )
        except Exception as exc:
            raise ProviderError(symbol, f"history request failed: {exc}") from exc
