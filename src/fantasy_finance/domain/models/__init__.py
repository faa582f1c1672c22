"""Domain models package."""

from fantasy_finance.domain.models.enums import RefresherState
from fantasy_finance.domain.models.transaction import Transaction
from fantasy_finance.domain.models.market import DailyClose, PriceQuote

__all__ = [
    "RefresherState",
    "Transaction",
    "DailyClose",
    "PriceQuote",
]
