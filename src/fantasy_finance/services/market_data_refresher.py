"""
Background market data refresher.

Each tick reads the tracked symbols from the ledger, fetches the latest price
of every symbol into the price cache and, once per calendar day, appends the
previous trading day's close to each symbol's market file.
"""

import asyncio
import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from fantasy_finance.core.exceptions import ProviderError, StoreError
from fantasy_finance.core.numbers import quantize, to_storable
from fantasy_finance.core.timezone import now_eastern, previous_trading_day
from fantasy_finance.domain.models import DailyClose, PriceQuote, RefresherState
from fantasy_finance.domain.views import RefresherStatus, TickSummary
from fantasy_finance.providers.market_data_provider import MarketDataProvider
from fantasy_finance.repositories.protocols import DailyCloseRepository
from fantasy_finance.services.ledger_service import normalize_symbol
from fantasy_finance.services.portfolio_engine import PortfolioEngine
from fantasy_finance.services.price_cache import PriceCache

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 120.0
DEFAULT_FETCH_TIMEOUT_SECONDS = 10.0


class MarketDataRefresher:
    """
    Sole writer of the price cache and of market files.

    State machine per tick: IDLE -> FETCHING -> UPDATING -> IDLE. Failures are
    isolated per symbol: they are logged, reported in the TickSummary and
    retried on the next tick.
    """

    def __init__(
        self,
        provider: MarketDataProvider,
        portfolio_engine: PortfolioEngine,
        price_cache: PriceCache,
        close_repo: DailyCloseRepository,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = 4,
        clock: Callable[[], datetime] = now_eastern,
    ):
        self._provider = provider
        self._portfolio = portfolio_engine
        self._price_cache = price_cache
        self._close_repo = close_repo
        self._interval = interval_seconds
        self._fetch_timeout = fetch_timeout_seconds
        self._max_workers = max_workers
        self._clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="market-data",
        )

        self._tick_lock = threading.Lock()
        self._status_lock = threading.Lock()
        self._state = RefresherState.IDLE
        self._tick_count = 0
        self._last_started: Optional[datetime] = None
        self._last_finished: Optional[datetime] = None
        self._last_failures: dict[str, str] = {}
        # symbol -> close date already present in its market file
        self._closes_done: dict[str, date] = {}
        # symbol -> provider call that outlived its timeout and still holds a worker
        self._in_flight: dict[str, Future] = {}

        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> TickSummary:
        """Run one refresh cycle synchronously and return what it did."""
        with self._tick_lock:
            started = self._clock()
            summary = TickSummary(
                started_at=started,
                close_date=previous_trading_day(started.date()),
            )
            self._set_state(RefresherState.FETCHING, started=started)
            try:
                summary.symbols = sorted(self._portfolio.all_symbols())
                prices = self._fetch_all(
                    summary.symbols,
                    self._provider.latest_price,
                    summary,
                    "latest price",
                )
                due = self._closes_due(summary.symbols, summary.close_date, summary)
                closes = self._fetch_all(
                    due,
                    lambda symbol: self._provider.close_price(symbol, summary.close_date),
                    summary,
                    "daily close",
                )

                self._set_state(RefresherState.UPDATING)
                for symbol, price in prices.items():
                    self._price_cache.update(
                        PriceQuote(symbol=symbol, price=price, observed_at=self._clock())
                    )
                    summary.prices_updated.append(symbol)
                for symbol, close_price in closes.items():
                    self._append_close(symbol, summary.close_date, close_price, summary)
            finally:
                summary.finished_at = self._clock()
                self._finish(summary)

        logger.info(
            "Refresh tick: %d symbol(s), %d price(s) updated, %d close(s) appended, %d failure(s)",
            len(summary.symbols),
            len(summary.prices_updated),
            len(summary.closes_appended),
            len(summary.failures),
        )
        return summary

    def _closes_due(
        self,
        symbols: list[str],
        close_date: date,
        summary: TickSummary,
    ) -> list[str]:
        """Symbols whose market file has no record for ``close_date`` yet."""
        due = []
        for symbol in symbols:
            if self._closes_done.get(symbol) == close_date:
                continue
            try:
                existing = self._close_repo.list_for(symbol)
            except StoreError as exc:
                self._record_failure(summary, symbol, "daily close", exc)
                continue
            if any(close.date == close_date for close in existing):
                self._closes_done[symbol] = close_date
                summary.closes_skipped.append(symbol)
            else:
                due.append(symbol)
        return due

    def _append_close(
        self,
        symbol: str,
        close_date: date,
        close_price: Decimal,
        summary: TickSummary,
    ) -> None:
        try:
            self._close_repo.append(
                DailyClose(symbol=symbol, date=close_date, close_price=close_price)
            )
        except StoreError as exc:
            self._record_failure(summary, symbol, "daily close", exc)
            return
        self._closes_done[symbol] = close_date
        summary.closes_appended.append(symbol)

    def _fetch_all(
        self,
        symbols: list[str],
        fetch: Callable[[str], Decimal],
        summary: TickSummary,
        what: str,
    ) -> dict[str, Decimal]:
        """
        Call ``fetch`` for every symbol on the worker pool.

        Each wave of free workers gets ``fetch_timeout`` seconds; a call still
        running at the deadline counts as a failure for its symbol. Such a call
        keeps its worker until the provider returns, so the symbol is not
        submitted again until then.
        """
        if not symbols:
            return {}
        futures: dict[str, Future] = {}
        for symbol in symbols:
            stuck = self._in_flight.get(symbol)
            if stuck is not None:
                if not stuck.done():
                    self._record_failure(
                        summary,
                        symbol,
                        what,
                        "previous request still running",
                    )
                    continue
                del self._in_flight[symbol]
            futures[symbol] = self._executor.submit(self._checked_fetch, fetch, symbol)
        if not futures:
            return {}

        free_workers = max(1, self._max_workers - len(self._in_flight))
        waves = math.ceil(len(futures) / free_workers)
        deadline = time.monotonic() + self._fetch_timeout * waves

        results: dict[str, Decimal] = {}
        for symbol, future in futures.items():
            remaining = max(0.0, deadline - time.monotonic())
            try:
                results[symbol] = future.result(timeout=remaining)
            except FuturesTimeoutError:
                if not future.cancel():
                    self._in_flight[symbol] = future
                self._record_failure(
                    summary,
                    symbol,
                    what,
                    f"timed out after {self._fetch_timeout:g}s",
                )
            except Exception as exc:
                self._record_failure(summary, symbol, what, exc)
        return results

    @staticmethod
    def _checked_fetch(fetch: Callable[[str], Decimal], symbol: str) -> Decimal:
        price = fetch(symbol)
        if price is None:
            raise ProviderError(symbol, "no price returned")
        price = Decimal(str(price)) if not isinstance(price, Decimal) else price
        if not price.is_finite() or price <= 0:
            raise ProviderError(symbol, f"invalid price {price}")
        try:
            stored = to_storable(quantize(price))
        except (ValueError, InvalidOperation) as exc:
            raise ProviderError(symbol, f"price {price} out of range") from exc
        if stored <= 0:
            raise ProviderError(symbol, f"price {price} rounds to zero")
        return stored

    @staticmethod
    def _record_failure(summary: TickSummary, symbol: str, what: str, error) -> None:
        message = f"{what}: {error}"
        logger.warning("Market data refresh failed for %s (%s)", symbol, message)
        if symbol in summary.failures:
            summary.failures[symbol] = f"{summary.failures[symbol]}; {message}"
        else:
            summary.failures[symbol] = message

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def closes_for(self, symbol: str) -> list[DailyClose]:
        """Daily closes recorded for a symbol, in write order."""
        return self._close_repo.list_for(normalize_symbol(symbol))

    def status(self) -> RefresherStatus:
        with self._status_lock:
            return RefresherStatus(
                state=self._state,
                running=self._task is not None and not self._task.done(),
                tick_count=self._tick_count,
                last_tick_started_at=self._last_started,
                last_tick_finished_at=self._last_finished,
                last_failures=dict(self._last_failures),
            )

    def _set_state(self, state: RefresherState, started: Optional[datetime] = None) -> None:
        with self._status_lock:
            self._state = state
            if started is not None:
                self._last_started = started

    def _finish(self, summary: TickSummary) -> None:
        with self._status_lock:
            self._state = RefresherState.IDLE
            self._tick_count += 1
            self._last_finished = summary.finished_at
            self._last_failures = dict(summary.failures)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Spawn the periodic task on the running event loop."""
        if self._task is not None and not self._task.done():
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._run(self._stop_event),
            name="market-data-refresher",
        )

    async def stop(self) -> None:
        """Ask the task to exit and wait for the in-flight tick to finish."""
        if self._task is None:
            return
        self._stop_event.set()
        try:
            await self._task
        finally:
            self._task = None

    def close(self) -> None:
        """Release the worker pool; hung provider calls are abandoned."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    async def _run(self, stop_event: asyncio.Event) -> None:
        loop = asyncio.get_running_loop()
        logger.info("Market data refresher started (interval %gs)", self._interval)
        while not stop_event.is_set():
            tick_started = loop.time()
            try:
                await asyncio.to_thread(self.tick)
            except Exception:
                logger.exception("Market data refresh tick failed")

            wait = max(0.0, self._interval - (loop.time() - tick_started))
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=wait)
            except asyncio.TimeoutError:
                pass
        logger.info("Market data refresher stopped")
