"""Parquet implementation of TransactionRepository."""

from pathlib import Path
from typing import Optional

from fantasy_finance.domain.models import Transaction
from fantasy_finance.storage import ColumnarStore, TRANSACTION_SCHEMA

LEDGER_FILE_NAME = "orders.parquet"


class ParquetTransactionRepository:
    """One parquet ledger file per user under ``<ledger_dir>/<user>/``."""

    def __init__(self, ledger_dir: Path, store: Optional[ColumnarStore[Transaction]] = None):
        self._ledger_dir = Path(ledger_dir)
        self._store = store or ColumnarStore(TRANSACTION_SCHEMA)

    def path_for(self, user: str) -> Path:
        return self._ledger_dir / user / LEDGER_FILE_NAME

    def append(self, transaction: Transaction) -> None:
        """Durably append one transaction to its user's ledger file."""
        self._store.append(self.path_for(transaction.user), [transaction])

    def load(self, user: str) -> list[Transaction]:
        """Read every transaction of a user, in write order."""
        return self._store.read_all(self.path_for(user))

    def list_users(self) -> list[str]:
        """List users that have a ledger file on disk."""
        if not self._ledger_dir.is_dir():
            return []
        return sorted(
            entry.name
            for entry in self._ledger_dir.iterdir()
            if entry.is_dir() and (entry / LEDGER_FILE_NAME).is_file()
        )
