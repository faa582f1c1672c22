"""Timezone utilities for US/Eastern market time."""

from datetime import date, datetime, timedelta

import pytz

EASTERN_TZ = pytz.timezone("US/Eastern")


def now_eastern() -> datetime:
    """Return current time in US/Eastern timezone."""
    return datetime.now(EASTERN_TZ)


def to_eastern(dt: datetime) -> datetime:
    """Convert a datetime to US/Eastern timezone."""
    if dt.tzinfo is None:
        # Assume naive datetime is already Eastern
        return EASTERN_TZ.localize(dt)
    return dt.astimezone(EASTERN_TZ)


def is_trading_day(day: date) -> bool:
    """Weekday calendar; exchange holidays are not modelled."""
    return day.weekday() < 5


def previous_trading_day(day: date) -> date:
    """Return the last trading day strictly before ``day``."""
    prev = day - timedelta(days=1)
    while not is_trading_day(prev):
        prev -= timedelta(days=1)
    return prev
