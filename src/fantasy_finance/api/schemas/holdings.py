"""Pydantic schemas for holdings endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class HoldingsResponse(BaseModel):
    """Net amount per symbol for one user (zero positions omitted)."""

    user: str
    holdings: dict[str, Decimal]


class HoldingResponse(BaseModel):
    """Net position of one (user, symbol) pair."""

    model_config = {"from_attributes": True}

    user: str
    symbol: str
    net_amount: Decimal


class AllHoldingsResponse(BaseModel):
    """Holdings keyed by user."""

    holdings: dict[str, dict[str, Decimal]]


class PositionResponse(BaseModel):
    """Response schema for a single valued position."""

    model_config = {"from_attributes": True}

    symbol: str
    net_amount: Decimal
    last_price: Optional[Decimal] = None
    market_value: Optional[Decimal] = None
    as_of: Optional[datetime] = None


class PositionsResponse(BaseModel):
    """Valued positions of a user."""

    user: str
    positions: list[PositionResponse]
    total_value: Decimal
