"""Parquet-backed repository implementations."""

from fantasy_finance.repositories.parquet.transaction_repo import ParquetTransactionRepository
from fantasy_finance.repositories.parquet.daily_close_repo import ParquetDailyCloseRepository

__all__ = [
    "ParquetTransactionRepository",
    "ParquetDailyCloseRepository",
]
