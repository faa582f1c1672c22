"""
Pytest configuration and fixtures for fantasy finance tests.

This module provides:
- Temporary data directory and settings fixtures
- Deterministic, failing and slow market data providers
- A controllable clock for the refresher
- Columnar store, repository and service fixtures
- A FastAPI TestClient wired to a temporary AppContext
"""

import threading
import time
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient

from fantasy_finance.app_context import AppContext
from fantasy_finance.config.settings import Settings, reset_settings
from fantasy_finance.core.exceptions import ProviderError, StorageIOError
from fantasy_finance.core.timezone import EASTERN_TZ
from fantasy_finance.domain.models import DailyClose, Transaction
from fantasy_finance.main import create_app
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
from fantasy_finance.storage import (
    ColumnarStore,
    TRANSACTION_SCHEMA,
    DAILY_CLOSE_SCHEMA,
)


# =============================================================================
# TIMEZONE HELPERS
# =============================================================================


def eastern_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 10,
    minute: int = 0,
    second: int = 0,
) -> datetime:
    """Create a localized datetime in US/Eastern timezone."""
    return EASTERN_TZ.localize(datetime(year, month, day, hour, minute, second))


class MutableClock:
    """Callable clock whose time tests can move."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def fixed_now() -> datetime:
    """Fixed 'now': Monday 2024-06-17 14:30 Eastern (previous trading day is Fri 06-14)."""
    return eastern_datetime(2024, 6, 17, 14, 30, 0)


@pytest.fixture
def clock(fixed_now) -> MutableClock:
    """Controllable clock starting at fixed_now."""
    return MutableClock(fixed_now)


# =============================================================================
# SETTINGS / STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Empty data directory for one test."""
    return tmp_path / "data"


@pytest.fixture
def settings(data_dir) -> Settings:
    """Settings pointing at the temp data dir with the refresher disabled."""
    reset_settings()
    yield Settings(
        data_dir=data_dir,
        market_provider="stub",
        refresher_enabled=False,
        refresh_interval_seconds=0.05,
        provider_timeout_seconds=0.3,
        provider_workers=4,
    )
    reset_settings()


@pytest.fixture
def transaction_store() -> ColumnarStore[Transaction]:
    return ColumnarStore(TRANSACTION_SCHEMA)


@pytest.fixture
def close_store() -> ColumnarStore[DailyClose]:
    return ColumnarStore(DAILY_CLOSE_SCHEMA)


@pytest.fixture
def transaction_repo(settings) -> ParquetTransactionRepository:
    """Provide test TransactionRepository."""
    return ParquetTransactionRepository(settings.get_ledger_dir())


@pytest.fixture
def close_repo(settings) -> ParquetDailyCloseRepository:
    """Provide test DailyCloseRepository."""
    return ParquetDailyCloseRepository(settings.get_market_dir())


# =============================================================================
# MARKET DATA PROVIDERS
# =============================================================================


class DeterministicMarketProvider:
    """
    Deterministic market data provider for testing.

    Provides fixed prices with no randomness and records every call.
    Symbols listed in ``failing`` raise ProviderError.
    """

    FIXED_PRICES = {
        "AAPL": (Decimal("185.50"), Decimal("184.25")),
        "GOOGL": (Decimal("142.75"), Decimal("141.50")),
        "MSFT": (Decimal("378.25"), Decimal("376.80")),
        "TSLA": (Decimal("248.75"), Decimal("250.10")),
        "SPY": (Decimal("485.25"), Decimal("484.10")),
    }

    def __init__(self, failing: Optional[set[str]] = None):
        self.failing = set(failing or ())
        self.latest_calls: list[str] = []
        self.close_calls: list[tuple[str, date]] = []
        self._lock = threading.Lock()

    def latest_price(self, symbol: str) -> Decimal:
        with self._lock:
            self.latest_calls.append(symbol)
        return self._lookup(symbol)[0]

    def close_price(self, symbol: str, day: date) -> Decimal:
        with self._lock:
            self.close_calls.append((symbol, day))
        return self._lookup(symbol)[1]

    def _lookup(self, symbol: str) -> tuple[Decimal, Decimal]:
        if symbol in self.failing:
            raise ProviderError(symbol, "simulated provider failure")
        if symbol not in self.FIXED_PRICES:
            raise ProviderError(symbol, "unknown symbol")
        return self.FIXED_PRICES[symbol]


class FailingMarketProvider:
    """Market provider that always raises an exception."""

    def latest_price(self, symbol: str) -> Decimal:
        raise ConnectionError("Network unavailable")

    def close_price(self, symbol: str, day: date) -> Decimal:
        raise ConnectionError("Network unavailable")


class SlowMarketProvider(DeterministicMarketProvider):
    """Deterministic provider that hangs on selected symbols."""

    def __init__(self, slow: set[str], delay_seconds: float = 1.0):
        super().__init__()
        self.slow = set(slow)
        self.delay_seconds = delay_seconds

    def _lookup(self, symbol: str) -> tuple[Decimal, Decimal]:
        if symbol in self.slow:
            time.sleep(self.delay_seconds)
        return super()._lookup(symbol)


class HangingMarketProvider(DeterministicMarketProvider):
    """Deterministic provider whose calls for selected symbols block until released."""

    def __init__(self, hanging: set[str]):
        super().__init__()
        self.hanging = set(hanging)
        self.release = threading.Event()

    def _lookup(self, symbol: str) -> tuple[Decimal, Decimal]:
        if symbol in self.hanging:
            self.release.wait(timeout=10)
        return super()._lookup(symbol)


@pytest.fixture
def deterministic_provider() -> DeterministicMarketProvider:
    """Provide deterministic market data provider."""
    return DeterministicMarketProvider()


@pytest.fixture
def failing_provider() -> FailingMarketProvider:
    """Provide a market provider that always fails."""
    return FailingMarketProvider()


# =============================================================================
# REPOSITORY DOUBLES
# =============================================================================


class FlakyTransactionRepository:
    """Wraps a real repository; fails the next N appends with StorageIOError."""

    def __init__(self, inner: ParquetTransactionRepository):
        self._inner = inner
        self.fail_next = 0

    def append(self, transaction: Transaction) -> None:
        if self.fail_next > 0:
            self.fail_next -= 1
            raise StorageIOError(self._inner.path_for(transaction.user), "disk full")
        self._inner.append(transaction)

    def load(self, user: str) -> list[Transaction]:
        return self._inner.load(user)

    def list_users(self) -> list[str]:
        return self._inner.list_users()


class BlockingTransactionRepository(FlakyTransactionRepository):
    """Blocks appends for one user until released."""

    def __init__(self, inner: ParquetTransactionRepository, blocked_user: str):
        super().__init__(inner)
        self.blocked_user = blocked_user
        self.started = threading.Event()
        self.release = threading.Event()

    def append(self, transaction: Transaction) -> None:
        if transaction.user == self.blocked_user:
            self.started.set()
            self.release.wait(timeout=5)
        super().append(transaction)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def ledger_service(transaction_repo) -> LedgerService:
    """Provide test LedgerService."""
    return LedgerService(transaction_repo=transaction_repo)


@pytest.fixture
def price_cache() -> PriceCache:
    return PriceCache()


@pytest.fixture
def portfolio_engine(ledger_service, price_cache) -> PortfolioEngine:
    """Provide test PortfolioEngine."""
    return PortfolioEngine(ledger_service=ledger_service, price_cache=price_cache)


@pytest.fixture
def refresher_factory(
    portfolio_engine,
    price_cache,
    close_repo,
    settings,
    clock,
) -> Callable[..., MarketDataRefresher]:
    """Factory for refreshers sharing the test ledger, cache and market dir."""
    created: list[MarketDataRefresher] = []

    def _create(provider, **overrides) -> MarketDataRefresher:
        kwargs = dict(
            provider=provider,
            portfolio_engine=portfolio_engine,
            price_cache=price_cache,
            close_repo=close_repo,
            interval_seconds=settings.refresh_interval_seconds,
            fetch_timeout_seconds=settings.provider_timeout_seconds,
            max_workers=settings.provider_workers,
            clock=clock,
        )
        kwargs.update(overrides)
        refresher = MarketDataRefresher(**kwargs)
        created.append(refresher)
        return refresher

    yield _create
    for refresher in created:
        refresher.close()


@pytest.fixture
def refresher(refresher_factory, deterministic_provider) -> MarketDataRefresher:
    """Provide a refresher backed by the deterministic provider."""
    return refresher_factory(deterministic_provider)


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def app_context(settings, deterministic_provider) -> AppContext:
    """AppContext over the temp data dir with the deterministic provider."""
    return AppContext(settings=settings, provider=deterministic_provider)


@pytest.fixture
def client(app_context) -> TestClient:
    """Provide FastAPI test client bound to the test AppContext."""
    app = create_app(app_context)
    with TestClient(app) as c:
        yield c


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def record_many(
    ledger: LedgerService,
    rows: list[tuple[str, str, str, str]],
) -> list[Transaction]:
    """Record (user, symbol, amount, price) rows in order."""
    return [
        ledger.record(user, symbol, Decimal(amount), Decimal(price))
        for user, symbol, amount, price in rows
    ]
