"""Transaction domain model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Transaction:
    """
    Ledger transaction entry (source of truth).

    - amount > 0 is a buy, amount < 0 is a sell
    - price is the per-share execution price, always positive
    - activity_id is unique across all users and never reused
    """

    activity_id: int
    user: str
    symbol: str
    amount: Decimal
    price: Decimal
    timestamp: datetime

    @property
    def is_buy(self) -> bool:
        """Return True if this transaction adds shares."""
        return self.amount > 0

    @property
    def notional(self) -> Decimal:
        """Signed cash value of the trade (amount × price)."""
        return self.amount * self.price
