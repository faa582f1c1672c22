"""Daily close repository protocol."""

from typing import Protocol

from fantasy_finance.domain.models import DailyClose


class DailyCloseRepository(Protocol):
    """Interface for per-symbol market file access."""

    def append(self, close: DailyClose) -> None:
        """Append one daily close to its symbol's market file."""
        ...

    def list_for(self, symbol: str) -> list[DailyClose]:
        """Read every daily close of a symbol, in write order ([] if none)."""
        ...
