"""Portfolio engine for deriving holdings from the ledger."""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable

from fantasy_finance.domain.models import Transaction
from fantasy_finance.domain.views import Holding, PositionView
from fantasy_finance.services.ledger_service import LedgerService, normalize_symbol
from fantasy_finance.services.price_cache import PriceCache


def fold_holdings(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """
    Sum amounts by symbol.

    Symbols whose net amount is exactly zero are omitted.
    """
    positions: dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for txn in transactions:
        positions[txn.symbol] += txn.amount
    return {symbol: net for symbol, net in positions.items() if net != 0}


class PortfolioEngine:
    """
    Stateless view over the ledger.

    Holdings are recomputed from transactions on every call and never stored.
    """

    def __init__(self, ledger_service: LedgerService, price_cache: PriceCache):
        self._ledger = ledger_service
        self._prices = price_cache

    def holdings_for(self, user: str) -> dict[str, Decimal]:
        """Net amount per symbol for a user (NotFoundError for unknown users)."""
        return fold_holdings(self._ledger.list_for(user))

    def holding(self, user: str, symbol: str) -> Holding:
        """Net position for one (user, symbol) pair; zero if never traded."""
        symbol = normalize_symbol(symbol)
        net = sum(
            (txn.amount for txn in self._ledger.list_for(user) if txn.symbol == symbol),
            Decimal("0"),
        )
        return Holding(user=user.strip(), symbol=symbol, net_amount=net)

    def all_holdings(self) -> dict[str, dict[str, Decimal]]:
        """Holdings for every known user."""
        by_user: dict[str, list[Transaction]] = defaultdict(list)
        for txn in self._ledger.list_all():
            by_user[txn.user].append(txn)
        return {user: fold_holdings(transactions) for user, transactions in by_user.items()}

    def all_symbols(self) -> set[str]:
        """Every symbol appearing in any user's ledger (the refresh target)."""
        return {txn.symbol for txn in self._ledger.list_all()}

    def positions_for(self, user: str) -> list[PositionView]:
        """Holdings joined with cached prices; price fields are None until fetched."""
        positions = []
        for symbol, net in sorted(self.holdings_for(user).items()):
            view = PositionView(symbol=symbol, net_amount=net)
            quote = self._prices.price_of(symbol)
            if quote is not None:
                view.last_price = quote.price
                view.market_value = net * quote.price
                view.as_of = quote.observed_at
            positions.append(view)
        return positions
