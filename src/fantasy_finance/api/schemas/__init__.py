"""Pydantic schemas for API request/response."""

from fantasy_finance.api.schemas.transaction import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionListResponse,
)
from fantasy_finance.api.schemas.holdings import (
    HoldingsResponse,
    HoldingResponse,
    AllHoldingsResponse,
    PositionResponse,
    PositionsResponse,
)
from fantasy_finance.api.schemas.market import (
    PriceQuoteResponse,
    PricesResponse,
    SymbolsResponse,
    DailyCloseResponse,
    DailyClosesResponse,
    RefresherStatusResponse,
)

__all__ = [
    "TransactionCreateRequest",
    "TransactionResponse",
    "TransactionListResponse",
    "HoldingsResponse",
    "HoldingResponse",
    "AllHoldingsResponse",
    "PositionResponse",
    "PositionsResponse",
    "PriceQuoteResponse",
    "PricesResponse",
    "SymbolsResponse",
    "DailyCloseResponse",
    "DailyClosesResponse",
    "RefresherStatusResponse",
]
