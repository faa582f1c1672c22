"""Ledger service: in-memory transaction ledger backed by per-user files."""

import logging
import re
import threading
from decimal import Decimal
from typing import Optional, Union

from fantasy_finance.core.exceptions import (
    NotFoundError,
    PersistenceFailed,
    StoreError,
    ValidationError,
)
from fantasy_finance.core.numbers import to_decimal, to_storable
from fantasy_finance.core.timezone import now_eastern
from fantasy_finance.domain.models import Transaction
from fantasy_finance.repositories.protocols import TransactionRepository

logger = logging.getLogger(__name__)

Number = Union[Decimal, int, float, str]

# Tickers such as AAPL, BRK.B, ^GSPC, EURUSD=X; symbols name market directories
SYMBOL_PATTERN = re.compile(r"[A-Z0-9^=-][A-Z0-9.^=-]{0,19}")


def normalize_symbol(symbol: Optional[str]) -> str:
    """Strip and uppercase a symbol; raise ValidationError unless it looks like a ticker."""
    stripped = (symbol or "").strip().upper()
    if not stripped:
        raise ValidationError("symbol must not be empty")
    if not SYMBOL_PATTERN.fullmatch(stripped):
        raise ValidationError(f"invalid symbol: {stripped!r}")
    return stripped


def normalize_user(user: Optional[str]) -> str:
    """
    Strip a user name and check it is usable as a directory name.

    Ledger files live under one directory per user, so separators and
    dot-names are rejected.
    """
    stripped = (user or "").strip()
    if not stripped:
        raise ValidationError("user must not be empty")
    if "/" in stripped or "\\" in stripped or stripped.startswith(".") or "\x00" in stripped:
        raise ValidationError(f"invalid user name: {stripped!r}")
    return stripped


class LedgerService:
    """
    Owner of the authoritative in-memory transaction set.

    Transactions are kept per user in insertion order and indexed by activity
    id. ``record`` is atomic in isolation: the in-memory append and the file
    append either both happen or the in-memory append is undone. Calls for the
    same user are serialized; different users persist concurrently.
    """

    def __init__(self, transaction_repo: TransactionRepository):
        self._transaction_repo = transaction_repo
        self._lock = threading.Lock()
        self._by_user: dict[str, list[Transaction]] = {}
        self._by_activity: dict[int, Transaction] = {}
        self._user_locks: dict[str, threading.Lock] = {}
        self._unavailable: dict[str, str] = {}
        self._next_activity_id = 1

    def rehydrate(self) -> int:
        """
        Load every user ledger file found on disk.

        Advances the activity id counter past the highest id seen. A user whose
        file cannot be read is logged and blocked for writes; other users load.
        Returns the number of transactions loaded.
        """
        loaded: dict[str, list[Transaction]] = {}
        unavailable: dict[str, str] = {}
        for user in self._transaction_repo.list_users():
            try:
                transactions = self._transaction_repo.load(user)
            except StoreError as exc:
                logger.error("Cannot load ledger for user %s: %s", user, exc)
                logger.warning(
                    "Activity ids stored in %s are not reserved; repair the file "
                    "before new ids reach them",
                    exc.path,
                )
                unavailable[user] = exc.message
                continue
            if transactions:
                loaded[user] = transactions

        count = 0
        with self._lock:
            self._unavailable.update(unavailable)
            for user, transactions in loaded.items():
                self._by_user[user] = list(transactions)
                for txn in transactions:
                    self._by_activity[txn.activity_id] = txn
                    if txn.activity_id >= self._next_activity_id:
                        self._next_activity_id = txn.activity_id + 1
                count += len(transactions)

        logger.info(
            "Rehydrated %d transaction(s) for %d user(s); next activity id %d",
            count,
            len(loaded),
            self._next_activity_id,
        )
        return count

    def record(
        self,
        user: str,
        symbol: str,
        amount: Number,
        price: Number,
    ) -> Transaction:
        """
        Record a buy (amount > 0) or sell (amount < 0) for a user.

        Raises ValidationError before touching the ledger, and
        PersistenceFailed if the ledger file could not be written (the
        transaction is then not recorded).
        """
        user = normalize_user(user)
        symbol = normalize_symbol(symbol)
        amount_dec = self._validate_number("amount", amount)
        price_dec = self._validate_number("price", price)
        if amount_dec == 0:
            raise ValidationError("amount must not be zero")
        if price_dec <= 0:
            raise ValidationError("price must be greater than zero")

        with self._user_lock(user):
            with self._lock:
                reason = self._unavailable.get(user)
                if reason is not None:
                    raise PersistenceFailed(f"ledger for user {user} is unavailable: {reason}")
                txn = Transaction(
                    activity_id=self._next_activity_id,
                    user=user,
                    symbol=symbol,
                    amount=amount_dec,
                    price=price_dec,
                    timestamp=now_eastern(),
                )
                self._next_activity_id += 1
                self._by_user.setdefault(user, []).append(txn)
                self._by_activity[txn.activity_id] = txn

            try:
                self._transaction_repo.append(txn)
            except StoreError as exc:
                self._rollback(txn)
                logger.error("Failed to persist activity %d for %s: %s", txn.activity_id, user, exc)
                raise PersistenceFailed(f"could not persist transaction for {user}: {exc.message}") from exc
            except Exception:
                self._rollback(txn)
                raise

        logger.info(
            "Recorded activity %d: %s %s %s %s @ %s",
            txn.activity_id,
            user,
            "buy" if txn.is_buy else "sell",
            symbol,
            abs(amount_dec),
            price_dec,
        )
        return txn

    def list_all(self) -> list[Transaction]:
        """Snapshot of every transaction; insertion order within each user."""
        with self._lock:
            return [txn for transactions in self._by_user.values() for txn in transactions]

    def list_for(self, user: str) -> list[Transaction]:
        """Transactions of one user; NotFoundError if they never recorded one."""
        key = (user or "").strip()
        with self._lock:
            transactions = self._by_user.get(key)
            if not transactions:
                raise NotFoundError("User", key)
            return list(transactions)

    def users(self) -> list[str]:
        """Users with at least one transaction, in first-seen order."""
        with self._lock:
            return list(self._by_user)

    def lookup_activity(self, activity_id: int) -> Optional[Transaction]:
        """Constant-time lookup by activity id across all users."""
        with self._lock:
            return self._by_activity.get(activity_id)

    def _user_lock(self, user: str) -> threading.Lock:
        with self._lock:
            lock = self._user_locks.get(user)
            if lock is None:
                lock = threading.Lock()
                self._user_locks[user] = lock
            return lock

    def _rollback(self, txn: Transaction) -> None:
        with self._lock:
            transactions = self._by_user.get(txn.user, [])
            if transactions and transactions[-1] is txn:
                transactions.pop()
            if not transactions:
                self._by_user.pop(txn.user, None)
            self._by_activity.pop(txn.activity_id, None)

    @staticmethod
    def _validate_number(field: str, value: Number) -> Decimal:
        if value is None or isinstance(value, bool):
            raise ValidationError(f"{field} is required")
        try:
            number = to_decimal(value)
        except ValueError:
            raise ValidationError(f"{field} must be a number, got {value!r}")
        if not number.is_finite():
            raise ValidationError(f"{field} must be finite")
        try:
            return to_storable(number)
        except ValueError as exc:
            raise ValidationError(f"{field} cannot be stored: {exc}")
