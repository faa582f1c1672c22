"""Pydantic schemas for transaction endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class TransactionCreateRequest(BaseModel):
    """Request schema for recording a transaction.

    Business rules (non-zero amount, positive price) are enforced by the
    ledger so they surface as 400 VALIDATION_ERROR responses.
    """

    user: str = Field(..., description="Owner of the transaction")
    symbol: str = Field(..., max_length=20, description="Stock symbol")
    amount: Decimal = Field(..., description="Shares; positive = buy, negative = sell")
    price: Decimal = Field(..., description="Price per share")

    @field_validator("symbol")
    @classmethod
    def uppercase_symbol(cls, v: str) -> str:
        return v.strip().upper()


class TransactionResponse(BaseModel):
    """Response schema for a single transaction."""

    model_config = {"from_attributes": True}

    activity_id: int
    user: str
    symbol: str
    amount: Decimal
    price: Decimal
    timestamp: datetime


class TransactionListResponse(BaseModel):
    """Response schema for listing transactions."""

    transactions: list[TransactionResponse]
    count: int
