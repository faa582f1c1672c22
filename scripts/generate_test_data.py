#!/usr/bin/env python3
"""
Seed a data directory with realistic ledger activity.

Records random buys and sells for a handful of users through the
LedgerService, so the parquet ledger files are written exactly as the
running service would write them.

Usage: python scripts/generate_test_data.py [DATA_DIR] [--users N] [--trades N]
"""

import argparse
import random
import sys
from decimal import Decimal
from pathlib import Path

# Add src/ to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from fantasy_finance.config.settings import Settings
from fantasy_finance.repositories.parquet import ParquetTransactionRepository
from fantasy_finance.services import LedgerService, PortfolioEngine, PriceCache

# Realistic stock symbols with approximate prices
STOCKS = [
    ("AAPL", 180.0),
    ("MSFT", 420.0),
    ("GOOGL", 160.0),
    ("AMZN", 150.0),
    ("TSLA", 250.0),
    ("NVDA", 500.0),
    ("META", 350.0),
    ("NFLX", 450.0),
]

USERS = ["alice", "bob", "carol", "dave", "erin"]


def generate_realistic_data(data_dir: Path, user_count: int, trade_count: int, seed: int) -> None:
    """Record ``trade_count`` trades per user, never selling more than held."""
    rng = random.Random(seed)
    settings = Settings(data_dir=data_dir)
    ledger = LedgerService(ParquetTransactionRepository(settings.get_ledger_dir()))
    loaded = ledger.rehydrate()
    print(f"Data dir: {settings.get_data_dir()} ({loaded} existing transaction(s))")
    print("=" * 60)

    for user in USERS[:user_count]:
        held: dict[str, int] = {}
        for _ in range(trade_count):
            symbol, base_price = rng.choice(STOCKS)
            price = Decimal(str(round(base_price * rng.uniform(0.9, 1.1), 2)))
            owned = held.get(symbol, 0)
            if owned > 0 and rng.random() < 0.3:
                amount = -rng.randint(1, owned)
            else:
                amount = rng.randint(1, 20)
            txn = ledger.record(user, symbol, amount, price)
            held[symbol] = owned + amount
            action = "BUY " if amount > 0 else "SELL"
            print(f"  #{txn.activity_id:<5} {user:<6} {action} {abs(amount):>3} {symbol:<5} @ ${price} (${abs(txn.notional)})")

    print("=" * 60)
    portfolio = PortfolioEngine(ledger, PriceCache())
    for user, holdings in portfolio.all_holdings().items():
        summary = ", ".join(f"{s}={n}" for s, n in sorted(holdings.items()))
        print(f"✓ {user}: {summary}")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("data_dir", nargs="?", default="./data", type=Path)
    parser.add_argument("--users", type=int, default=3)
    parser.add_argument("--trades", type=int, default=20)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()
    generate_realistic_data(args.data_dir, args.users, args.trades, args.seed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
