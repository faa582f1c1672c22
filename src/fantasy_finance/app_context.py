"""Application context: builds and owns every long-lived service.

The FastAPI app holds one AppContext for its lifetime; tests build their own
against a temporary data directory.
"""

import logging
from typing import Optional

from fantasy_finance.config.settings import Settings, get_settings
from fantasy_finance.providers import (
    MarketDataProvider,
    StubMarketDataProvider,
    YahooMarketDataProvider,
)
from fantasy_finance.repositories.parquet import (
    ParquetDailyCloseRepository,
    ParquetTransactionRepository,
)
from fantasy_finance.services import (
    LedgerService,
    MarketDataRefresher,
    PortfolioEngine,
    PriceCache,
)

logger = logging.getLogger(__name__)


def build_provider(settings: Settings) -> MarketDataProvider:
    """Select the market data provider named in settings."""
    if settings.market_provider == "stub":
        return StubMarketDataProvider()
    return YahooMarketDataProvider(timeout_seconds=settings.provider_timeout_seconds)


class AppContext:
    """
    Composition root wiring repositories, services and the refresher.

    Services are created eagerly; ``startup``/``shutdown`` drive the parts
    with a lifecycle (ledger rehydration and the background refresher).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        provider: Optional[MarketDataProvider] = None,
    ):
        self.settings = settings or get_settings()

        self.transaction_repo = ParquetTransactionRepository(self.settings.get_ledger_dir())
        self.close_repo = ParquetDailyCloseRepository(self.settings.get_market_dir())

        self.ledger = LedgerService(transaction_repo=self.transaction_repo)
        self.price_cache = PriceCache()
        self.portfolio = PortfolioEngine(
            ledger_service=self.ledger,
            price_cache=self.price_cache,
        )
        self.refresher = MarketDataRefresher(
            provider=provider or build_provider(self.settings),
            portfolio_engine=self.portfolio,
            price_cache=self.price_cache,
            close_repo=self.close_repo,
            interval_seconds=self.settings.refresh_interval_seconds,
            fetch_timeout_seconds=self.settings.provider_timeout_seconds,
            max_workers=self.settings.provider_workers,
        )
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    async def startup(self) -> None:
        """Rehydrate the ledger and start the refresher (must run on the event loop)."""
        if self._started:
            return
        self.ledger.rehydrate()
        if self.settings.refresher_enabled:
            self.refresher.start()
        self._started = True
        logger.info("Application context started (data dir %s)", self.settings.get_data_dir())

    async def shutdown(self) -> None:
        """Stop the refresher after its in-flight tick, then release workers."""
        await self.refresher.stop()
        self.refresher.close()
        self._started = False
