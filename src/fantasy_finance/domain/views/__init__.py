"""View models derived from the ledger and market data."""

from fantasy_finance.domain.views.portfolio import Holding, PositionView
from fantasy_finance.domain.views.refresher import TickSummary, RefresherStatus

__all__ = [
    "Holding",
    "PositionView",
    "TickSummary",
    "RefresherStatus",
]
