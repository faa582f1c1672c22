"""Transaction ledger endpoints."""

from fastapi import APIRouter, Depends

from fantasy_finance.api.deps import get_ledger_service
from fantasy_finance.api.schemas import (
    TransactionCreateRequest,
    TransactionResponse,
    TransactionListResponse,
)
from fantasy_finance.services import LedgerService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.post("", response_model=TransactionResponse, status_code=201)
def add_transaction(
    data: TransactionCreateRequest,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Record a buy (positive amount) or sell (negative amount)."""
    txn = ledger.record(
        user=data.user,
        symbol=data.symbol,
        amount=data.amount,
        price=data.price,
    )
    return TransactionResponse.model_validate(txn)


@router.get("", response_model=TransactionListResponse)
def list_transactions(
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    """List every transaction of every user."""
    transactions = ledger.list_all()
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        count=len(transactions),
    )


@router.get("/{user}", response_model=TransactionListResponse)
def list_user_transactions(
    user: str,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionListResponse:
    """List one user's transactions; 404 if the user has none."""
    transactions = ledger.list_for(user)
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        count=len(transactions),
    )
