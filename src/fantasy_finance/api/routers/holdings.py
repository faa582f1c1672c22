"""Holdings endpoints (derived from the ledger on every request)."""

from decimal import Decimal

from fastapi import APIRouter, Depends

from fantasy_finance.api.deps import get_portfolio_engine
from fantasy_finance.api.schemas import (
    HoldingsResponse,
    HoldingResponse,
    AllHoldingsResponse,
    PositionResponse,
    PositionsResponse,
)
from fantasy_finance.services import PortfolioEngine

router = APIRouter(prefix="/holdings", tags=["holdings"])


@router.get("", response_model=AllHoldingsResponse)
def get_all_holdings(
    portfolio: PortfolioEngine = Depends(get_portfolio_engine),
) -> AllHoldingsResponse:
    """Holdings of every known user."""
    return AllHoldingsResponse(holdings=portfolio.all_holdings())


@router.get("/{user}", response_model=HoldingsResponse)
def get_user_holdings(
    user: str,
    portfolio: PortfolioEngine = Depends(get_portfolio_engine),
) -> HoldingsResponse:
    """Net amount per symbol for one user."""
    return HoldingsResponse(user=user.strip(), holdings=portfolio.holdings_for(user))


@router.get("/{user}/positions", response_model=PositionsResponse)
def get_user_positions(
    user: str,
    portfolio: PortfolioEngine = Depends(get_portfolio_engine),
) -> PositionsResponse:
    """Holdings valued at the latest cached prices."""
    positions = portfolio.positions_for(user)

    total_value = Decimal("0")
    for p in positions:
        if p.market_value is not None:
            total_value += p.market_value

    return PositionsResponse(
        user=user.strip(),
        positions=[PositionResponse.model_validate(p) for p in positions],
        total_value=total_value,
    )


@router.get("/{user}/symbols/{symbol}", response_model=HoldingResponse)
def get_user_holding(
    user: str,
    symbol: str,
    portfolio: PortfolioEngine = Depends(get_portfolio_engine),
) -> HoldingResponse:
    """Net amount of one symbol for a user (zero if never traded)."""
    return HoldingResponse.model_validate(portfolio.holding(user, symbol))
