"""Activity lookup endpoint."""

from fastapi import APIRouter, Depends

from fantasy_finance.api.deps import get_ledger_service
from fantasy_finance.api.schemas import TransactionResponse
from fantasy_finance.core.exceptions import NotFoundError
from fantasy_finance.services import LedgerService

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("/{activity_id}", response_model=TransactionResponse)
def get_activity(
    activity_id: int,
    ledger: LedgerService = Depends(get_ledger_service),
) -> TransactionResponse:
    """Look up a transaction by activity id."""
    txn = ledger.lookup_activity(activity_id)
    if txn is None:
        raise NotFoundError("Activity", str(activity_id))
    return TransactionResponse.model_validate(txn)
