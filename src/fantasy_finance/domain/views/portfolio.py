"""View models for holdings outputs."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Holding:
    """
    Net position for a (user, symbol) pair.

    Never stored; always the sum of the user's transaction amounts.
    """

    user: str
    symbol: str
    net_amount: Decimal


@dataclass
class PositionView:
    """Holding joined with the latest cached price."""

    symbol: str
    net_amount: Decimal
    last_price: Optional[Decimal] = None
    market_value: Optional[Decimal] = None
    as_of: Optional[datetime] = None
