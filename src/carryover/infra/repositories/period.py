"""SQLModel implementation of the Period repository."""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from sqlmodel import Session, select

from ...errors import StorageError
from ...models.line_item import LineItem
from ...models.period import Period
from ...models.transaction import Transaction
from ...services.periods import next_month, previous_month
from ..database import storage_errors

_LOCKS_GUARD = threading.Lock()
# An entry lives only while some caller holds a reference to its lock.
_PERIOD_LOCKS: "weakref.WeakValueDictionary[int, threading.RLock]" = weakref.WeakValueDictionary()


def _lock_for(period_id: int) -> threading.RLock:
    with _LOCKS_GUARD:
        lock = _PERIOD_LOCKS.get(period_id)
        if lock is None:
            lock = _PERIOD_LOCKS[period_id] = threading.RLock()
        return lock


class SQLModelPeriodRepository:
    """SQLModel-based period repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        """Look up a user's period by calendar month."""
        with storage_errors("get_period"), self.session_factory() as session:
            statement = (
                select(Period)
                .where(Period.user_id == user_id)
                .where(Period.month == month)
                .where(Period.year == year)
            )
            period = session.exec(statement).first()
            if period:
                session.expunge(period)
            return period

    def get_period_by_id(self, period_id: int) -> Optional[Period]:
        """Retrieve a period by ID."""
        with storage_errors("get_period_by_id"), self.session_factory() as session:
            period = session.get(Period, period_id)
            if period:
                session.expunge(period)
            return period

    def get_previous_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        """Chronological predecessor, looked up by calendar month rather than by id."""
        prev_month, prev_year = previous_month(month, year)
        return self.get_period(user_id, prev_month, prev_year)

    def get_next_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        """Chronological successor, looked up by calendar month rather than by id."""
        nxt_month, nxt_year = next_month(month, year)
        return self.get_period(user_id, nxt_month, nxt_year)

    def list_for_user(self, user_id: int) -> list[Period]:
        """All periods of a user, earliest first."""
        with storage_errors("list_for_user"), self.session_factory() as session:
            statement = (
                select(Period)
                .where(Period.user_id == user_id)
                .order_by(Period.year, Period.month)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, period: Period) -> Period:
        """Create a new period."""
        with storage_errors("create_period"), self.session_factory() as session:
            session.add(period)
            session.commit()
            session.refresh(period)
            session.expunge(period)
            return period

    def list_line_items(self, period_id: int) -> list[LineItem]:
        """Get all line items of a period."""
        with storage_errors("list_line_items"), self.session_factory() as session:
            statement = (
                select(LineItem).where(LineItem.period_id == period_id).order_by(LineItem.id)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_transactions(self, period_id: int) -> list[Transaction]:
        """Get all transactions of a period."""
        with storage_errors("list_transactions"), self.session_factory() as session:
            statement = (
                select(Transaction)
                .where(Transaction.period_id == period_id)
                .order_by(Transaction.id)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def persist_balances(
        self, period_id: int, ending_balance: float, rollover_balance: float
    ) -> None:
        """Store the computed balances on the period row.

        The row is selected ``FOR UPDATE`` where the backend supports it;
        SQLite ignores the clause and relies on ``period_lock``.
        """
        with storage_errors("persist_balances"), self.session_factory() as session:
            period = session.exec(
                select(Period).where(Period.id == period_id).with_for_update()
            ).first()
            if period is None:
                raise StorageError(f"Period {period_id} disappeared before balances were stored")
            period.ending_balance = ending_balance
            period.rollover_balance = rollover_balance
            period.updated_at = datetime.now(timezone.utc)
            session.add(period)
            session.commit()

    @contextmanager
    def period_lock(self, period_id: int) -> Iterator[None]:
        """Serialize recompute-then-persist for one period within this process."""
        lock = _lock_for(period_id)
        with lock:
            yield
