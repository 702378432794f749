"""Period balance arithmetic.

Formulas for a period M:

- available_M = income_M + rollover_M
- expenses_M = envelope-reconciled expenses and savings (see ``envelopes``)
- ending_balance_M = available_M - expenses_M
- remaining_M = ending_balance_M

``ending_balance`` here includes the incoming carry, so it is the figure
handed to the next period and matches the stored ``Period.rollover_balance``.
The stored ``Period.ending_balance`` leaves the carry out: income_M - expenses_M.
``remaining`` is the "left to spend" view; it equals ``ending_balance`` in value.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, Sequence

from ..domain.records import KIND_INCOME, OUTFLOW_KINDS, is_checked
from .envelopes import reconcile_expenses

COHERENCE_EPSILON = 0.01


@dataclass(frozen=True, slots=True)
class PeriodMetrics:
    total_income: float
    total_expenses: float
    available: float
    ending_balance: float
    remaining: float
    rollover: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class RealizedMetrics:
    realized_income: float
    realized_expenses: float
    realized_balance: float
    checked_count: int
    total_count: int


def _sum_kind(items: Iterable, kinds: frozenset[str] | set[str]) -> float:
    return sum(float(item.amount) for item in items if item.kind in kinds)


def total_income(lines: Sequence, transactions: Sequence = ()) -> float:
    """Income planned in lines plus income received in transactions."""

    return _sum_kind(lines, {KIND_INCOME}) + _sum_kind(transactions, {KIND_INCOME})


def total_expenses(lines: Sequence, transactions: Sequence = ()) -> float:
    """Naive expense + saving sum over both collections, for legacy display only.

    Double counts allocated transactions; use ``all_metrics`` for balances.
    """

    return _sum_kind(lines, OUTFLOW_KINDS) + _sum_kind(transactions, OUTFLOW_KINDS)


def available(total_income: float, rollover_in: float) -> float:
    return total_income + rollover_in


def ending_balance(available: float, total_expenses: float) -> float:
    # Negative values are recorded as-is; overspending is never rejected.
    return available - total_expenses


def remaining(available: float, total_expenses: float) -> float:
    return ending_balance(available, total_expenses)


def realized_income(lines: Sequence, transactions: Sequence = ()) -> float:
    return total_income(
        [line for line in lines if is_checked(line)],
        [txn for txn in transactions if is_checked(txn)],
    )


def realized_expenses(lines: Sequence, transactions: Sequence = ()) -> float:
    return total_expenses(
        [line for line in lines if is_checked(line)],
        [txn for txn in transactions if is_checked(txn)],
    )


def realized_balance(lines: Sequence, transactions: Sequence = ()) -> float:
    """Checked income minus checked expenses."""

    return realized_income(lines, transactions) - realized_expenses(lines, transactions)


def realized_metrics(lines: Sequence, transactions: Sequence = ()) -> RealizedMetrics:
    income = realized_income(lines, transactions)
    expenses = realized_expenses(lines, transactions)
    checked = sum(1 for item in [*lines, *transactions] if is_checked(item))
    return RealizedMetrics(
        realized_income=income,
        realized_expenses=expenses,
        realized_balance=income - expenses,
        checked_count=checked,
        total_count=len(lines) + len(transactions),
    )


def all_metrics(
    lines: Sequence, transactions: Sequence = (), rollover_in: float = 0.0
) -> PeriodMetrics:
    """Compute every balance figure of a period in one pass.

    ``lines`` should hold stored lines only; the incoming carry is passed as
    ``rollover_in`` rather than as a virtual rollover line.
    """

    income = total_income(lines, transactions)
    expenses = reconcile_expenses(lines, transactions)
    avail = available(income, rollover_in)
    ending = ending_balance(avail, expenses)
    return PeriodMetrics(
        total_income=income,
        total_expenses=expenses,
        available=avail,
        ending_balance=ending,
        remaining=ending,
        rollover=rollover_in,
    )


def validate_coherence(metrics: PeriodMetrics) -> bool:
    """Check the formulas hold between the figures of ``metrics``.

    Diagnostics only; never used to block persistence.
    """

    if metrics.total_income < 0 or metrics.total_expenses < 0:
        return False
    if abs(metrics.available - (metrics.total_income + metrics.rollover)) > COHERENCE_EPSILON:
        return False
    if abs(metrics.ending_balance - (metrics.available - metrics.total_expenses)) > COHERENCE_EPSILON:
        return False
    if abs(metrics.remaining - metrics.ending_balance) > COHERENCE_EPSILON:
        return False
    return True
