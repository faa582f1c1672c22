"""Repository protocol definitions (interfaces)."""

from fantasy_finance.repositories.protocols.transaction_repo import TransactionRepository
from fantasy_finance.repositories.protocols.daily_close_repo import DailyCloseRepository

__all__ = [
    "TransactionRepository",
    "DailyCloseRepository",
]
