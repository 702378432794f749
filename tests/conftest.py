"""Pytest configuration and shared fixtures for carryover tests.

Provides a throwaway SQLite database, repository and service wiring, test
data factories, and an in-memory period repository for exercising the
rollover propagator without touching storage.
"""

from __future__ import annotations

import logging
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, Optional

import pytest
from sqlmodel import SQLModel, create_engine

from carryover.errors import StorageError
from carryover.infra.database import create_session_factory
from carryover.infra.repositories import (
    SQLModelLineItemRepository,
    SQLModelPeriodRepository,
    SQLModelTemplateRepository,
    SQLModelTransactionRepository,
)
from carryover.logging_config import ROOT_LOGGER_NAME
from carryover.models import LineItem, Period, Transaction, User
from carryover.services.budget_lines import BudgetLineService
from carryover.services.periods import next_month, previous_month
from carryover.services.rollover import RolloverPropagator
from carryover.services.transactions import TransactionService

_ENV_VARS = (
    "CARRYOVER_DATA_DIR",
    "CARRYOVER_DATABASE_URL",
    "CARRYOVER_DEV_MODE",
    "CARRYOVER_LOG_LEVEL",
    "CARRYOVER_PAY_DAY",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep configuration out of the real environment and the working tree."""

    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CARRYOVER_DATA_DIR", str(tmp_path / "instance"))


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory as used by the repositories, with a default user attached."""

    factory = create_session_factory(db_engine)
    with factory() as session:
        user_row = User(username="tester")
        session.add(user_row)
        session.commit()
        session.refresh(user_row)
        session.expunge(user_row)
    factory.user = user_row  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def user(session_factory) -> User:
    return session_factory.user


@pytest.fixture
def other_user(session_factory) -> User:
    with session_factory() as session:
        row = User(username="someone-else")
        session.add(row)
        session.commit()
        session.refresh(row)
        session.expunge(row)
    return row


@pytest.fixture
def period_repo(session_factory) -> SQLModelPeriodRepository:
    return SQLModelPeriodRepository(session_factory)


@pytest.fixture
def line_repo(session_factory) -> SQLModelLineItemRepository:
    return SQLModelLineItemRepository(session_factory)


@pytest.fixture
def transaction_repo(session_factory) -> SQLModelTransactionRepository:
    return SQLModelTransactionRepository(session_factory)


@pytest.fixture
def template_repo(session_factory) -> SQLModelTemplateRepository:
    return SQLModelTemplateRepository(session_factory)


@pytest.fixture
def propagator(period_repo) -> RolloverPropagator:
    return RolloverPropagator(period_repo)


@pytest.fixture
def line_service(line_repo, period_repo, transaction_repo, template_repo, propagator):
    return BudgetLineService(
        lines=line_repo,
        periods=period_repo,
        transactions=transaction_repo,
        templates=template_repo,
        propagator=propagator,
    )


@pytest.fixture
def transaction_service(transaction_repo, line_repo, period_repo, propagator):
    return TransactionService(
        transactions=transaction_repo,
        lines=line_repo,
        periods=period_repo,
        propagator=propagator,
    )


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def period_factory(period_repo, user):
    """Factory for creating stored periods.

    Returns:
        Callable: Function that persists and returns a Period
    """

    def _create_period(
        month: int,
        year: int = 2025,
        owner: User | None = None,
        description: str = "",
    ) -> Period:
        owner = owner or user
        return period_repo.create(
            Period(user_id=owner.id, month=month, year=year, description=description)
        )

    return _create_period


@pytest.fixture
def line_factory(line_repo):
    """Factory for creating stored line items directly, bypassing the service."""

    def _create_line(
        period: Period,
        amount: float,
        kind: str = "expense",
        name: str = "Test line",
        **fields,
    ) -> LineItem:
        return line_repo.create(
            LineItem(
                period_id=period.id,
                user_id=period.user_id,
                name=name,
                amount=amount,
                kind=kind,
                **fields,
            )
        )

    return _create_line


@pytest.fixture
def transaction_factory(transaction_repo):
    """Factory for creating stored transactions directly, bypassing the service."""

    def _create_transaction(
        period: Period,
        amount: float,
        kind: str = "expense",
        envelope: LineItem | None = None,
        name: str = "Test transaction",
        **fields,
    ) -> Transaction:
        return transaction_repo.create(
            Transaction(
                period_id=period.id,
                user_id=period.user_id,
                envelope_line_id=envelope.id if envelope is not None else None,
                name=name,
                amount=amount,
                kind=kind,
                **fields,
            )
        )

    return _create_transaction


# =============================================================================
# In-memory repository
# =============================================================================


class InMemoryPeriodRepository:
    """Dict-backed PeriodRepository for propagation tests.

    ``fail_persist`` and ``fail_reads`` hold period ids whose balance write or
    line read raises StorageError, to simulate a storage outage on one period.
    """

    def __init__(self) -> None:
        self.periods: dict[int, Period] = {}
        self.lines: dict[int, list] = {}
        self.transactions: dict[int, list] = {}
        self.fail_persist: set[int] = set()
        self.fail_reads: set[int] = set()
        self.persist_calls: list[int] = []
        self._next_id = 1

    def add_period(self, month: int, year: int = 2025, user_id: int = 1) -> Period:
        period = Period(id=self._next_id, user_id=user_id, month=month, year=year)
        self._next_id += 1
        self.periods[period.id] = period
        self.lines[period.id] = []
        self.transactions[period.id] = []
        return period

    def add_line(self, period: Period, amount: float, kind: str = "expense", **fields) -> LineItem:
        line = LineItem(
            id=self._next_id,
            period_id=period.id,
            user_id=period.user_id,
            name=fields.pop("name", f"{kind} line"),
            amount=amount,
            kind=kind,
            **fields,
        )
        self._next_id += 1
        self.lines[period.id].append(line)
        return line

    def add_transaction(
        self, period: Period, amount: float, kind: str = "expense", envelope: LineItem | None = None
    ) -> Transaction:
        txn = Transaction(
            id=self._next_id,
            period_id=period.id,
            user_id=period.user_id,
            envelope_line_id=envelope.id if envelope is not None else None,
            amount=amount,
            kind=kind,
        )
        self._next_id += 1
        self.transactions[period.id].append(txn)
        return txn

    def get_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        for period in self.periods.values():
            if (period.user_id, period.month, period.year) == (user_id, month, year):
                return period
        return None

    def get_period_by_id(self, period_id: int) -> Optional[Period]:
        return self.periods.get(period_id)

    def get_previous_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        return self.get_period(user_id, *previous_month(month, year))

    def get_next_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        return self.get_period(user_id, *next_month(month, year))

    def list_line_items(self, period_id: int) -> list:
        if period_id in self.fail_reads:
            raise StorageError(f"read of period {period_id} failed")
        return list(self.lines.get(period_id, []))

    def list_transactions(self, period_id: int) -> list:
        return list(self.transactions.get(period_id, []))

    def persist_balances(self, period_id: int, ending_balance: float, rollover_balance: float) -> None:
        self.persist_calls.append(period_id)
        if period_id in self.fail_persist:
            raise StorageError(f"write of period {period_id} failed")
        period = self.periods[period_id]
        period.ending_balance = ending_balance
        period.rollover_balance = rollover_balance

    @contextmanager
    def period_lock(self, period_id: int) -> Iterator[None]:
        yield


@pytest.fixture
def memory_repo() -> InMemoryPeriodRepository:
    return InMemoryPeriodRepository()


@pytest.fixture
def memory_propagator(memory_repo) -> RolloverPropagator:
    return RolloverPropagator(memory_repo)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture
def reset_logging():
    """Detach handlers installed by ``setup_logging`` once the test is done."""

    yield
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(logging.NOTSET)


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01) -> None:
    """Assert two money amounts are equal within a cent."""

    assert abs(actual - expected) < tolerance, f"Expected {expected}, got {actual}"


def assert_same_instant(actual: Optional[datetime], expected: datetime) -> None:
    """Assert two timestamps name the same moment; naive values are read as UTC."""

    def as_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    assert actual is not None, f"Expected {expected}, got None"
    assert as_utc(actual) == as_utc(expected), f"Expected {expected}, got {actual}"
