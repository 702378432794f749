"""Data loader for the period detail view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from ..domain.records import KIND_INCOME, RolloverLine
from ..domain.repositories.period import PeriodRepository
from ..errors import NotFoundError
from ..models.line_item import LineItem
from ..models.period import Period
from ..models.transaction import Transaction
from .envelopes import EnvelopeUsage, envelope_usage
from .metrics import PeriodMetrics, RealizedMetrics, all_metrics, realized_metrics
from .rollover import RolloverPropagator


@dataclass(slots=True)
class PeriodOverview:
    period: Period
    rollover_line: Optional[RolloverLine]
    lines: list[Union[RolloverLine, LineItem]]
    transactions: list[Transaction]
    metrics: PeriodMetrics
    realized: RealizedMetrics
    envelopes: list[EnvelopeUsage]


def load_period_overview(
    repository: PeriodRepository, propagator: RolloverPropagator, period_id: int
) -> PeriodOverview:
    """Gather everything the detail view of one period shows.

    Reads only; balances are computed on the fly from the persisted carry of
    the previous month, nothing is written back.
    """

    period = repository.get_period_by_id(period_id)
    if period is None:
        raise NotFoundError("Period", period_id)

    stored_lines = repository.list_line_items(period.id)
    transactions = repository.list_transactions(period.id)
    rollover_line = propagator.rollover_line_for(period)

    rollover_in = 0.0
    if rollover_line is not None:
        rollover_in = rollover_line.amount if rollover_line.kind == KIND_INCOME else -rollover_line.amount

    lines: list[Union[RolloverLine, LineItem]] = list(stored_lines)
    if rollover_line is not None:
        lines.insert(0, rollover_line)

    return PeriodOverview(
        period=period,
        rollover_line=rollover_line,
        lines=lines,
        transactions=transactions,
        metrics=all_metrics(stored_lines, transactions, rollover_in),
        realized=realized_metrics(lines, transactions),
        envelopes=envelope_usage(stored_lines, transactions),
    )
