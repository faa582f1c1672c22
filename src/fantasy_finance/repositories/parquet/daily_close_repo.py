"""Parquet implementation of DailyCloseRepository."""

from pathlib import Path
from typing import Optional

from fantasy_finance.domain.models import DailyClose
from fantasy_finance.storage import ColumnarStore, DAILY_CLOSE_SCHEMA

MARKET_FILE_NAME = "closes.parquet"


class ParquetDailyCloseRepository:
    """One parquet market file per symbol under ``<market_dir>/<symbol>/``."""

    def __init__(self, market_dir: Path, store: Optional[ColumnarStore[DailyClose]] = None):
        self._market_dir = Path(market_dir)
        self._store = store or ColumnarStore(DAILY_CLOSE_SCHEMA)

    def path_for(self, symbol: str) -> Path:
        return self._market_dir / symbol / MARKET_FILE_NAME

    def append(self, close: DailyClose) -> None:
        """Append one daily close to its symbol's market file."""
        self._store.append(self.path_for(close.symbol), [close])

    def list_for(self, symbol: str) -> list[DailyClose]:
        """Read every daily close of a symbol, in write order."""
        return self._store.read_all(self.path_for(symbol))
