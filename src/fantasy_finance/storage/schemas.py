"""Parquet layouts for ledger and market files."""

from typing import Any

import pyarrow as pa

from fantasy_finance.core.numbers import DECIMAL_SCALE, quantize, strip_zeros
from fantasy_finance.core.timezone import to_eastern
from fantasy_finance.domain.models import DailyClose, Transaction
from fantasy_finance.storage.columnar_store import RecordSchema

DECIMAL_TYPE = pa.decimal128(38, DECIMAL_SCALE)


def _transaction_to_row(txn: Transaction) -> dict[str, Any]:
    return {
        "activity_id": txn.activity_id,
        "user": txn.user,
        "symbol": txn.symbol,
        "amount": quantize(txn.amount),
        "price": quantize(txn.price),
        "timestamp": txn.timestamp,
    }


def _transaction_from_row(row: dict[str, Any]) -> Transaction:
    return Transaction(
        activity_id=row["activity_id"],
        user=row["user"],
        symbol=row["symbol"],
        amount=strip_zeros(row["amount"]),
        price=strip_zeros(row["price"]),
        timestamp=to_eastern(row["timestamp"]),
    )


def _daily_close_to_row(close: DailyClose) -> dict[str, Any]:
    return {
        "symbol": close.symbol,
        "date": close.date,
        "close_price": quantize(close.close_price),
    }


def _daily_close_from_row(row: dict[str, Any]) -> DailyClose:
    return DailyClose(
        symbol=row["symbol"],
        date=row["date"],
        close_price=strip_zeros(row["close_price"]),
    )


TRANSACTION_SCHEMA: RecordSchema[Transaction] = RecordSchema(
    name="transaction",
    arrow_schema=pa.schema([
        pa.field("activity_id", pa.uint64(), nullable=False),
        pa.field("user", pa.string(), nullable=False),
        pa.field("symbol", pa.string(), nullable=False),
        pa.field("amount", DECIMAL_TYPE, nullable=False),
        pa.field("price", DECIMAL_TYPE, nullable=False),
        pa.field("timestamp", pa.timestamp("us", tz="UTC"), nullable=False),
    ]),
    to_row=_transaction_to_row,
    from_row=_transaction_from_row,
)

DAILY_CLOSE_SCHEMA: RecordSchema[DailyClose] = RecordSchema(
    name="daily_close",
    arrow_schema=pa.schema([
        pa.field("symbol", pa.string(), nullable=False),
        pa.field("date", pa.date32(), nullable=False),
        pa.field("close_price", DECIMAL_TYPE, nullable=False),
    ]),
    to_row=_daily_close_to_row,
    from_row=_daily_close_from_row,
)
