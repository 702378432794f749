"""Shared vocabulary for line items, transactions and the virtual rollover line."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

KIND_INCOME = "income"
KIND_EXPENSE = "expense"
KIND_SAVING = "saving"

KINDS = frozenset({KIND_INCOME, KIND_EXPENSE, KIND_SAVING})
# Savings are counted as expenses in every aggregate.
OUTFLOW_KINDS = frozenset({KIND_EXPENSE, KIND_SAVING})

RECURRENCE_FIXED = "fixed"
RECURRENCE_ONE_OFF = "one_off"
RECURRENCES = frozenset({RECURRENCE_FIXED, RECURRENCE_ONE_OFF})

ROLLOVER_ID_PREFIX = "rollover-"


class FinancialItem(Protocol):
    """Anything carrying a kind and an amount: stored lines, transactions, rollover lines."""

    kind: str
    amount: float


@dataclass(frozen=True, slots=True)
class RolloverLine:
    """Read-only income/expense line standing for a previous period's carry."""

    id: str
    name: str
    amount: float
    kind: str
    source_period_id: Optional[int] = None
    target_period_id: Optional[int] = None
    recurrence: str = RECURRENCE_ONE_OFF
    checked_at: Optional[datetime] = None
    is_rollover: bool = True


def rollover_line_id(source_period_id: int) -> str:
    return f"{ROLLOVER_ID_PREFIX}{source_period_id}"


def is_rollover_id(value: object) -> bool:
    """Return True for ids that belong to synthesized rollover lines."""

    return isinstance(value, str) and value.startswith(ROLLOVER_ID_PREFIX)


def is_rollover(item: object) -> bool:
    return bool(getattr(item, "is_rollover", False))


def is_checked(item: object) -> bool:
    return getattr(item, "checked_at", None) is not None
