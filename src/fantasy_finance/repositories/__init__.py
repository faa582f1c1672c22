"""Repository layer - data access abstractions and implementations."""

from fantasy_finance.repositories.protocols import (
    TransactionRepository,
    DailyCloseRepository,
)

__all__ = [
    "TransactionRepository",
    "DailyCloseRepository",
]
