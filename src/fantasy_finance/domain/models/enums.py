"""Enumerations for domain models."""

from enum import Enum


class RefresherState(str, Enum):
    """Phases of one market data refresher tick."""

    IDLE = "IDLE"
    FETCHING = "FETCHING"
    UPDATING = "UPDATING"
