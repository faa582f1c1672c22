"""View models describing market data refresher activity."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from fantasy_finance.domain.models.enums import RefresherState


@dataclass
class TickSummary:
    """Outcome of a single refresher tick."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    close_date: Optional[date] = None
    symbols: list[str] = field(default_factory=list)
    prices_updated: list[str] = field(default_factory=list)
    closes_appended: list[str] = field(default_factory=list)
    closes_skipped: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)


@dataclass
class RefresherStatus:
    """Snapshot of the refresher state machine."""

    state: RefresherState
    running: bool
    tick_count: int = 0
    last_tick_started_at: Optional[datetime] = None
    last_tick_finished_at: Optional[datetime] = None
    last_failures: dict[str, str] = field(default_factory=dict)
