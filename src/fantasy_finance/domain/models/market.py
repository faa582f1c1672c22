"""Market data domain models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class PriceQuote:
    """Latest observed price for a symbol. Lives only in the price cache."""

    symbol: str
    price: Decimal
    observed_at: datetime


@dataclass(frozen=True)
class DailyClose:
    """
    Closing price for one symbol on one calendar date.

    IMPORTANT: at most one record per (symbol, date) in a market file.
    """

    symbol: str
    date: date
    close_price: Decimal
