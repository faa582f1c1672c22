"""
Unit tests for MarketDataRefresher.

Tests cover:
- Price cache updates for every tracked symbol
- One daily close per symbol per day, across ticks and restarts
- Per-symbol failure isolation and retry
- Provider timeouts
- Status reporting
- Start/stop lifecycle on an event loop
"""

import asyncio
import time
from datetime import date
from decimal import Decimal

import pytest

from fantasy_finance.core.exceptions import ProviderError, ValidationError
from fantasy_finance.domain.models import RefresherState
from tests.conftest import (
    DeterministicMarketProvider,
    HangingMarketProvider,
    SlowMarketProvider,
    record_many,
)


@pytest.fixture
def holdings(ledger_service):
    """alice holds AAPL, bob holds MSFT."""
    return record_many(ledger_service, [
        ("alice", "AAPL", "5", "100"),
        ("bob", "MSFT", "2", "300"),
    ])


# =============================================================================
# PRICE REFRESH TESTS
# =============================================================================


class TestPriceRefresh:
    """Tests for latest price fetching."""

    def test_tick_with_empty_ledger(self, refresher, deterministic_provider, price_cache):
        """
        GIVEN no transactions
        WHEN a tick runs
        THEN the provider is not called and nothing changes
        """
        summary = refresher.tick()

        assert summary.symbols == []
        assert deterministic_provider.latest_calls == []
        assert price_cache.all_prices() == {}

    def test_tick_updates_cache(self, holdings, refresher, price_cache, clock):
        """
        GIVEN alice holds AAPL and bob holds MSFT
        WHEN a tick runs
        THEN both prices are in the cache stamped with the tick time
        """
        summary = refresher.tick()

        assert sorted(summary.prices_updated) == ["AAPL", "MSFT"]
        assert price_cache.price_of("AAPL").price == Decimal("185.50")
        assert price_cache.price_of("MSFT").price == Decimal("378.25")
        assert price_cache.price_of("AAPL").observed_at == clock.now

    def test_new_symbol_picked_up_next_tick(self, holdings, ledger_service, refresher, price_cache):
        """
        GIVEN a tick already ran
        WHEN a TSLA buy is recorded and another tick runs
        THEN TSLA is priced
        """
        refresher.tick()
        assert price_cache.price_of("TSLA") is None

        ledger_service.record("carol", "TSLA", 1, 250)
        refresher.tick()

        assert price_cache.price_of("TSLA").price == Decimal("248.75")

    def test_closed_position_still_refreshed(self, ledger_service, refresher, price_cache):
        record_many(ledger_service, [
            ("alice", "AAPL", "1", "100"),
            ("alice", "AAPL", "-1", "100"),
        ])

        refresher.tick()

        assert price_cache.price_of("AAPL") is not None


# =============================================================================
# DAILY CLOSE TESTS
# =============================================================================


class TestDailyCloses:
    """Tests for once-per-day close persistence."""

    def test_first_tick_appends_previous_trading_day_close(self, holdings, refresher, close_repo):
        """
        GIVEN it is Monday 2024-06-17
        WHEN the first tick runs
        THEN Friday 2024-06-14 closes are appended for AAPL and MSFT
        """
        summary = refresher.tick()

        assert summary.close_date == date(2024, 6, 14)
        assert sorted(summary.closes_appended) == ["AAPL", "MSFT"]
        [aapl] = close_repo.list_for("AAPL")
        assert aapl.date == date(2024, 6, 14)
        assert aapl.close_price == Decimal("184.25")

    def test_second_tick_same_day_does_not_duplicate(
        self, holdings, refresher, close_repo, deterministic_provider, clock
    ):
        """
        GIVEN a tick already appended today's closes
        WHEN another tick runs later the same day
        THEN no close is appended or fetched again
        """
        refresher.tick()
        clock.advance(minutes=2)

        summary = refresher.tick()

        assert summary.closes_appended == []
        assert len(close_repo.list_for("AAPL")) == 1
        assert len(close_repo.list_for("MSFT")) == 1
        assert sorted(s for s, _ in deterministic_provider.close_calls) == ["AAPL", "MSFT"]

    def test_restart_same_day_does_not_duplicate(
        self, holdings, refresher_factory, close_repo
    ):
        """
        GIVEN closes were appended by a refresher that has since stopped
        WHEN a fresh refresher ticks on the same day
        THEN the existing closes are detected and skipped
        """
        refresher_factory(DeterministicMarketProvider()).tick()

        provider = DeterministicMarketProvider()
        summary = refresher_factory(provider).tick()

        assert sorted(summary.closes_skipped) == ["AAPL", "MSFT"]
        assert provider.close_calls == []
        assert len(close_repo.list_for("AAPL")) == 1

    def test_next_day_appends_again(self, holdings, refresher, close_repo, clock):
        """
        GIVEN Monday's tick appended Friday's close
        WHEN Tuesday's tick runs
        THEN Monday's close is appended after it
        """
        refresher.tick()
        clock.advance(days=1)

        refresher.tick()

        assert [c.date for c in close_repo.list_for("AAPL")] == [
            date(2024, 6, 14),
            date(2024, 6, 17),
        ]

    def test_closes_for_normalizes_symbol(self, holdings, refresher):
        refresher.tick()

        assert len(refresher.closes_for(" aapl")) == 1

    @pytest.mark.parametrize("symbol", ["../../ESCAPE", ".HIDDEN", "A/B", ""])
    def test_closes_for_rejects_unsafe_symbol(self, refresher, symbol):
        with pytest.raises(ValidationError):
            refresher.closes_for(symbol)


# =============================================================================
# FAILURE ISOLATION TESTS
# =============================================================================


class TestFailureIsolation:
    """Tests that one symbol's failure does not affect others."""

    def test_failing_symbol_does_not_block_others(
        self, ledger_service, refresher_factory, price_cache, close_repo
    ):
        """
        GIVEN alice holds AAPL and BAD, and the provider fails for BAD
        WHEN a tick runs
        THEN AAPL is priced and closed, and BAD is reported as failed
        """
        record_many(ledger_service, [
            ("alice", "AAPL", "1", "100"),
            ("alice", "BAD", "1", "10"),
        ])
        refresher = refresher_factory(DeterministicMarketProvider(failing={"BAD"}))

        summary = refresher.tick()

        assert summary.prices_updated == ["AAPL"]
        assert summary.closes_appended == ["AAPL"]
        assert "BAD" in summary.failures
        assert "latest price" in summary.failures["BAD"]
        assert "daily close" in summary.failures["BAD"]
        assert price_cache.price_of("BAD") is None
        assert close_repo.list_for("BAD") == []

    def test_failed_close_retried_next_tick(
        self, holdings, refresher_factory, close_repo
    ):
        """
        GIVEN the provider fails for MSFT on the first tick
        WHEN it recovers before the second tick on the same day
        THEN the MSFT close is appended by the second tick
        """
        provider = DeterministicMarketProvider(failing={"MSFT"})
        refresher = refresher_factory(provider)
        refresher.tick()
        assert close_repo.list_for("MSFT") == []

        provider.failing.clear()
        summary = refresher.tick()

        assert summary.closes_appended == ["MSFT"]
        assert len(close_repo.list_for("MSFT")) == 1
        assert len(close_repo.list_for("AAPL")) == 1

    def test_all_failures_keep_previous_cache(
        self, holdings, refresher_factory, failing_provider, price_cache
    ):
        """
        GIVEN prices were fetched once
        WHEN the provider becomes unavailable
        THEN the tick completes with failures and old prices stay cached
        """
        refresher_factory(DeterministicMarketProvider()).tick()

        refresher = refresher_factory(failing_provider)
        summary = refresher.tick()

        assert set(summary.failures) == {"AAPL", "MSFT"}
        assert price_cache.price_of("AAPL").price == Decimal("185.50")
        assert refresher.status().state == RefresherState.IDLE

    def test_non_positive_price_is_failure(self, holdings, refresher_factory, price_cache):
        """
        GIVEN a provider returning zero for AAPL
        WHEN a tick runs
        THEN AAPL fails and is not cached
        """

        class ZeroProvider(DeterministicMarketProvider):
            def latest_price(self, symbol):
                if symbol == "AAPL":
                    return Decimal("0")
                return super().latest_price(symbol)

        summary = refresher_factory(ZeroProvider()).tick()

        assert "AAPL" in summary.failures
        assert price_cache.price_of("AAPL") is None
        assert price_cache.price_of("MSFT") is not None

    def test_price_below_storage_scale_is_failure(self, holdings, refresher_factory, price_cache):
        """
        GIVEN a provider returning a price that rounds to zero at 8 decimal places
        WHEN a tick runs
        THEN AAPL fails instead of caching or storing a zero price
        """

        class DustProvider(DeterministicMarketProvider):
            def latest_price(self, symbol):
                if symbol == "AAPL":
                    return Decimal("0.000000001")
                return super().latest_price(symbol)

        summary = refresher_factory(DustProvider()).tick()

        assert "AAPL" in summary.failures
        assert price_cache.price_of("AAPL") is None

    def test_provider_price_rounded_to_storage_scale(self, holdings, refresher_factory, price_cache):
        class PreciseProvider(DeterministicMarketProvider):
            def latest_price(self, symbol):
                return Decimal("185.123456789")

        refresher_factory(PreciseProvider()).tick()

        assert price_cache.price_of("AAPL").price == Decimal("185.12345679")

    def test_corrupt_market_file_isolated(self, holdings, refresher, close_repo, price_cache):
        """
        GIVEN AAPL's market file is corrupt
        WHEN a tick runs
        THEN AAPL's close fails, its price still updates, and MSFT is unaffected
        """
        path = close_repo.path_for("AAPL")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"garbage")

        summary = refresher.tick()

        assert "AAPL" in summary.failures
        assert "AAPL" in summary.prices_updated
        assert summary.closes_appended == ["MSFT"]
        assert path.read_bytes() == b"garbage"

    def test_provider_error_message_reported(self, holdings, refresher_factory):
        summary = refresher_factory(DeterministicMarketProvider(failing={"AAPL"})).tick()

        assert str(ProviderError("AAPL", "simulated provider failure")) in summary.failures["AAPL"]


# =============================================================================
# TIMEOUT TESTS
# =============================================================================


class TestTimeouts:
    """Tests for hung provider calls."""

    def test_slow_symbol_times_out_others_succeed(
        self, ledger_service, refresher_factory, price_cache
    ):
        """
        GIVEN the provider hangs for SLOW longer than the fetch timeout
        WHEN a tick runs
        THEN SLOW is reported as timed out and AAPL is still updated
        """
        record_many(ledger_service, [
            ("alice", "AAPL", "1", "100"),
            ("alice", "SLOW", "1", "10"),
        ])
        provider = SlowMarketProvider(slow={"SLOW"}, delay_seconds=1.0)
        refresher = refresher_factory(provider, fetch_timeout_seconds=0.1)

        summary = refresher.tick()

        assert "timed out" in summary.failures["SLOW"]
        assert price_cache.price_of("AAPL").price == Decimal("185.50")
        assert price_cache.price_of("SLOW") is None

    def test_hung_symbol_does_not_starve_others_across_ticks(
        self, holdings, refresher_factory, price_cache
    ):
        """
        GIVEN the provider hangs on MSFT and only two workers exist
        WHEN four ticks run while MSFT is still hung
        THEN AAPL is refreshed on every tick and MSFT is called only once
        """
        provider = HangingMarketProvider(hanging={"MSFT"})
        refresher = refresher_factory(provider, max_workers=2, fetch_timeout_seconds=0.1)
        try:
            for _ in range(4):
                summary = refresher.tick()
                assert summary.prices_updated == ["AAPL"]
                assert "MSFT" in summary.failures
            assert provider.latest_calls.count("MSFT") == 1
            assert ("MSFT", date(2024, 6, 14)) not in provider.close_calls
        finally:
            provider.release.set()

    def test_hung_symbol_resubmitted_once_it_returns(
        self, holdings, refresher_factory, price_cache
    ):
        """
        GIVEN MSFT's earlier call hung past the timeout
        WHEN the provider call finally returns and the next tick runs
        THEN MSFT is fetched again and priced
        """
        provider = HangingMarketProvider(hanging={"MSFT"})
        refresher = refresher_factory(provider, max_workers=2, fetch_timeout_seconds=0.1)
        first = refresher.tick()
        assert "timed out" in first.failures["MSFT"]

        provider.hanging.clear()
        provider.release.set()
        for _ in range(50):
            summary = refresher.tick()
            if "MSFT" in summary.prices_updated:
                break
            time.sleep(0.02)

        assert price_cache.price_of("MSFT").price == Decimal("378.25")
        assert provider.latest_calls.count("MSFT") == 2


# =============================================================================
# STATUS AND LIFECYCLE TESTS
# =============================================================================


class TestStatusAndLifecycle:
    """Tests for status snapshots and the background task."""

    def test_initial_status(self, refresher):
        status = refresher.status()

        assert status.state == RefresherState.IDLE
        assert status.running is False
        assert status.tick_count == 0
        assert status.last_tick_started_at is None

    def test_status_after_tick(self, holdings, refresher_factory, clock):
        """
        GIVEN a tick with one failing symbol
        WHEN I read the status
        THEN tick count, timestamps and last failures are reported
        """
        refresher = refresher_factory(DeterministicMarketProvider(failing={"MSFT"}))
        refresher.tick()

        status = refresher.status()

        assert status.tick_count == 1
        assert status.state == RefresherState.IDLE
        assert status.last_tick_started_at == clock.now
        assert set(status.last_failures) == {"MSFT"}

    def test_start_and_stop(self, holdings, refresher_factory, price_cache):
        """
        GIVEN a refresher with a short interval
        WHEN it is started on an event loop and later stopped
        THEN it ticks at least once and reports not running after stop
        """
        refresher = refresher_factory(DeterministicMarketProvider(), interval_seconds=0.05)

        async def scenario():
            refresher.start()
            assert refresher.status().running is True
            for _ in range(200):
                if refresher.status().tick_count >= 2:
                    break
                await asyncio.sleep(0.01)
            await refresher.stop()

        asyncio.run(scenario())

        status = refresher.status()
        assert status.tick_count >= 2
        assert status.running is False
        assert price_cache.price_of("AAPL") is not None

    def test_stop_without_start(self, refresher):
        asyncio.run(refresher.stop())

        assert refresher.status().running is False
