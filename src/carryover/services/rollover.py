"""Rollover propagation across a user's chain of monthly periods.

Each period stores two figures. ``ending_balance`` is the month on its own,
income minus reconciled expenses. ``rollover_balance`` is the cumulative carry
leaving it, ``rollover_in + ending_balance``, where ``rollover_in`` is the
persisted ``rollover_balance`` of the calendar month right before it.
``rollover_balance`` equals ``PeriodMetrics.ending_balance``, which already
includes the incoming carry.

After a period changes, it and every stored period that follows it without
a gap are recomputed, earliest first, so each one reads a freshly persisted
predecessor.

Failures are contained per period: a storage or computation error is
logged and that period yields ``None`` instead of raising into the
mutation that triggered the cascade.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..domain.records import KIND_EXPENSE, KIND_INCOME, RolloverLine, rollover_line_id
from ..domain.repositories.period import PeriodRepository
from ..errors import NotFoundError, StorageError
from ..logging_config import get_logger
from ..models.period import Period
from .metrics import PeriodMetrics, all_metrics
from .periods import month_label, period_key

logger = get_logger("rollover")


@dataclass(frozen=True, slots=True)
class PeriodBalance:
    """Outcome of recomputing one period.

    ``ending_balance`` is the month on its own; ``rollover_balance`` adds the
    incoming carry and is what the next month receives.
    """

    period_id: int
    month: int
    year: int
    rollover_in: float
    ending_balance: float
    rollover_balance: float
    metrics: PeriodMetrics
    rollover_line: Optional[RolloverLine]


@dataclass(frozen=True, slots=True)
class AvailableToSpend:
    """``available_to_spend`` is income plus the incoming carry, before any spending."""

    ending_balance: float
    rollover: float
    rollover_balance: float
    available_to_spend: float


def build_rollover_line(
    source: Period, carry: float, *, target_period_id: Optional[int] = None
) -> Optional[RolloverLine]:
    """Virtual line carrying ``source``'s cumulative balance into the next month.

    Returns None when there is nothing to carry.
    """

    if carry == 0:
        return None
    return RolloverLine(
        id=rollover_line_id(source.id),
        target_period_id=target_period_id,
        name=f"Rollover {month_label(source.month, source.year)}",
        amount=abs(carry),
        kind=KIND_INCOME if carry > 0 else KIND_EXPENSE,
        source_period_id=source.id,
    )


class RolloverPropagator:
    """Recomputes period balances and threads the carry through later periods."""

    def __init__(self, repository: PeriodRepository):
        self.repository = repository

    # ------------------------------------------------------------------ reads

    def _resolve_rollover_in(self, period: Period) -> tuple[float, Optional[Period]]:
        previous = self.repository.get_previous_period(period.user_id, period.month, period.year)
        if previous is None or previous.rollover_balance is None:
            return 0.0, previous
        return float(previous.rollover_balance), previous

    def rollover_line_for(self, period: Period) -> Optional[RolloverLine]:
        """Incoming rollover line to display at the top of ``period``."""

        try:
            rollover_in, previous = self._resolve_rollover_in(period)
        except Exception:
            logger.exception(
                "Could not resolve incoming rollover", extra={"period_id": period.id}
            )
            return None
        if previous is None:
            return None
        return build_rollover_line(previous, rollover_in, target_period_id=period.id)

    # ------------------------------------------------------------ recompute

    def _recompute(self, period: Period) -> PeriodBalance:
        with self.repository.period_lock(period.id):
            rollover_in, _ = self._resolve_rollover_in(period)
            lines = self.repository.list_line_items(period.id)
            transactions = self.repository.list_transactions(period.id)
            metrics = all_metrics(lines, transactions, rollover_in)
            ending_balance = metrics.total_income - metrics.total_expenses
            rollover_balance = rollover_in + ending_balance
            self.repository.persist_balances(period.id, ending_balance, rollover_balance)

        logger.info(
            "Period balances persisted",
            extra={
                "period_id": period.id,
                "ending_balance": ending_balance,
                "rollover_balance": rollover_balance,
            },
        )
        return PeriodBalance(
            period_id=period.id,
            month=period.month,
            year=period.year,
            rollover_in=rollover_in,
            ending_balance=ending_balance,
            rollover_balance=rollover_balance,
            metrics=metrics,
            rollover_line=build_rollover_line(period, rollover_balance),
        )

    def _try_recompute(self, period: Period) -> Optional[PeriodBalance]:
        try:
            return self._recompute(period)
        except StorageError:
            logger.exception(
                "Storage failure while recomputing period; balances left unchanged",
                extra={"period_id": period.id},
            )
        except Exception:
            logger.exception(
                "Unexpected failure while recomputing period; balances left unchanged",
                extra={"period_id": period.id},
            )
        return None

    def _cascade(self, period: Period) -> tuple[Optional[PeriodBalance], list[int]]:
        result = self._try_recompute(period)
        visited = [period.id]
        failures = 0 if result is not None else 1

        current = period
        while True:
            try:
                following = self.repository.get_next_period(
                    current.user_id, current.month, current.year
                )
            except Exception:
                logger.exception(
                    "Could not look up the next period; cascade stopped",
                    extra={"period_id": current.id},
                )
                break
            if following is None:
                break
            if self._try_recompute(following) is None:
                failures += 1
            visited.append(following.id)
            current = following

        logger.info(
            "Rollover cascade finished",
            extra={"start_period_id": period.id, "periods": len(visited), "failures": failures},
        )
        return result, visited

    def recompute_and_propagate(self, period: Period) -> Optional[PeriodBalance]:
        """Recompute ``period`` then every later period up to the first missing month.

        Returns the target period's balance, or None when that period failed.
        """

        result, _ = self._cascade(period)
        return result

    def recompute_periods(self, periods: Iterable[Period]) -> None:
        """Cascade from several periods, earliest first, skipping ones already covered."""

        covered: set[int] = set()
        for period in sorted(periods, key=period_key):
            if period.id in covered:
                continue
            _, visited = self._cascade(period)
            covered.update(visited)

    def propagate_from(self, *period_ids: int) -> None:
        """Entry point for mutations: cascade from the given periods, never raising."""

        periods: list[Period] = []
        for period_id in dict.fromkeys(period_ids):
            try:
                period = self.repository.get_period_by_id(period_id)
            except Exception:
                logger.exception("Could not load period", extra={"period_id": period_id})
                continue
            if period is None:
                logger.warning("Period vanished before recompute", extra={"period_id": period_id})
                continue
            periods.append(period)
        self.recompute_periods(periods)

    def available_to_spend(self, period_id: int) -> Optional[AvailableToSpend]:
        """Recompute one period without cascading and report what it can spend.

        Raises NotFoundError when the period does not exist.
        """

        try:
            period = self.repository.get_period_by_id(period_id)
        except Exception:
            logger.exception("Could not load period", extra={"period_id": period_id})
            return None
        if period is None:
            raise NotFoundError("Period", period_id)

        balance = self._try_recompute(period)
        if balance is None:
            return None
        return AvailableToSpend(
            ending_balance=balance.ending_balance,
            rollover=balance.rollover_in,
            rollover_balance=balance.rollover_balance,
            available_to_spend=balance.metrics.available,
        )
