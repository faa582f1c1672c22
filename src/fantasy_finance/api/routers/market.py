"""Market data endpoints. Served from the price cache and market files only."""

from fastapi import APIRouter, Depends

from fantasy_finance.api.deps import (
    get_portfolio_engine,
    get_price_cache,
    get_refresher,
)
from fantasy_finance.api.schemas import (
    PriceQuoteResponse,
    PricesResponse,
    SymbolsResponse,
    DailyCloseResponse,
    DailyClosesResponse,
    RefresherStatusResponse,
)
from fantasy_finance.core.exceptions import NotFoundError
from fantasy_finance.services import MarketDataRefresher, PortfolioEngine, PriceCache

router = APIRouter(prefix="/market", tags=["market"])


@router.get("/prices", response_model=PricesResponse)
def get_prices(
    price_cache: PriceCache = Depends(get_price_cache),
) -> PricesResponse:
    """Latest cached price of every symbol fetched so far."""
    return PricesResponse(
        prices={
            symbol: PriceQuoteResponse.model_validate(quote)
            for symbol, quote in sorted(price_cache.all_prices().items())
        }
    )


@router.get("/prices/{symbol}", response_model=PriceQuoteResponse)
def get_price(
    symbol: str,
    price_cache: PriceCache = Depends(get_price_cache),
) -> PriceQuoteResponse:
    """Latest cached price of one symbol; 404 until it has been fetched."""
    quote = price_cache.price_of(symbol)
    if quote is None:
        raise NotFoundError("Price", symbol.strip().upper())
    return PriceQuoteResponse.model_validate(quote)


@router.get("/symbols", response_model=SymbolsResponse)
def get_symbols(
    portfolio: PortfolioEngine = Depends(get_portfolio_engine),
) -> SymbolsResponse:
    """Symbols the refresher tracks (every symbol in any ledger)."""
    return SymbolsResponse(symbols=sorted(portfolio.all_symbols()))


@router.get("/closes/{symbol}", response_model=DailyClosesResponse)
def get_daily_closes(
    symbol: str,
    refresher: MarketDataRefresher = Depends(get_refresher),
) -> DailyClosesResponse:
    """Persisted daily closes of a symbol, oldest first."""
    closes = refresher.closes_for(symbol)
    return DailyClosesResponse(
        symbol=symbol.strip().upper(),
        closes=[DailyCloseResponse.model_validate(c) for c in closes],
    )


@router.get("/refresher", response_model=RefresherStatusResponse)
def get_refresher_status(
    refresher: MarketDataRefresher = Depends(get_refresher),
) -> RefresherStatusResponse:
    """Current state of the background refresher."""
    return RefresherStatusResponse.model_validate(refresher.status())
