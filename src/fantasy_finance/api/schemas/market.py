"""Pydantic schemas for market data endpoints."""

import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from fantasy_finance.domain.models import RefresherState


class PriceQuoteResponse(BaseModel):
    """Response schema for a cached quote."""

    model_config = {"from_attributes": True}

    symbol: str
    price: Decimal
    observed_at: datetime


class PricesResponse(BaseModel):
    """All cached quotes keyed by symbol."""

    prices: dict[str, PriceQuoteResponse]


class SymbolsResponse(BaseModel):
    """Symbols tracked by the refresher."""

    symbols: list[str]


class DailyCloseResponse(BaseModel):
    """Response schema for one persisted daily close."""

    model_config = {"from_attributes": True}

    symbol: str
    date: dt.date
    close_price: Decimal


class DailyClosesResponse(BaseModel):
    """Daily close history of one symbol."""

    symbol: str
    closes: list[DailyCloseResponse]


class RefresherStatusResponse(BaseModel):
    """Refresher state machine snapshot."""

    model_config = {"from_attributes": True}

    state: RefresherState
    running: bool
    tick_count: int
    last_tick_started_at: Optional[datetime] = None
    last_tick_finished_at: Optional[datetime] = None
    last_failures: dict[str, str]
