"""Transaction repository protocol."""

from typing import Protocol

from fantasy_finance.domain.models import Transaction


class TransactionRepository(Protocol):
    """Interface for per-user ledger file access."""

    def append(self, transaction: Transaction) -> None:
        """Durably append one transaction to its user's ledger file."""
        ...

    def load(self, user: str) -> list[Transaction]:
        """Read every transaction of a user, in write order ([] if none)."""
        ...

    def list_users(self) -> list[str]:
        """List users that have a ledger file on disk."""
        ...
