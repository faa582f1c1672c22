"""Fantasy finance: ledger-derived holdings with background market data refresh."""

__version__ = "0.1.0"
