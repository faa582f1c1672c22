"""Columnar (parquet) persistence."""

from fantasy_finance.storage.columnar_store import ColumnarStore, RecordSchema
from fantasy_finance.storage.schemas import TRANSACTION_SCHEMA, DAILY_CLOSE_SCHEMA

__all__ = [
    "ColumnarStore",
    "RecordSchema",
    "TRANSACTION_SCHEMA",
    "DAILY_CLOSE_SCHEMA",
]
