"""Transaction mutations. Each successful write triggers a rollover cascade."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..domain.records import OUTFLOW_KINDS
from ..domain.repositories import LineItemRepository, PeriodRepository, TransactionRepository
from ..errors import NotFoundError
from ..logging_config import get_logger
from ..models.period import Period
from ..models.transaction import Transaction
from . import validation
from .rollover import RolloverPropagator

logger = get_logger("transactions")

# Distinguishes "leave the envelope alone" from "make the transaction free" (None).
_UNCHANGED = object()


@dataclass
class TransactionService:
    """Record, edit, check and delete actual money movements."""

    transactions: TransactionRepository
    lines: LineItemRepository
    periods: PeriodRepository
    propagator: RolloverPropagator

    def _require_period(self, period_id: object) -> Period:
        period = self.periods.get_period_by_id(validation.require_id(period_id, "Period id"))
        if period is None:
            raise NotFoundError("Period", period_id)
        return period

    def _require_transaction(self, transaction_id: object) -> Transaction:
        txn = self.transactions.get_by_id(validation.require_id(transaction_id, "Transaction id"))
        if txn is None:
            raise NotFoundError("Transaction", transaction_id)
        return txn

    def _check_envelope(self, envelope_line_id: object, *, period_id: int, kind: str) -> int:
        """Validate an allocation target and return its id."""

        line_id = validation.require_id(envelope_line_id, "Envelope line id")
        if kind not in OUTFLOW_KINDS:
            validation.reject("Only expense and saving transactions can be allocated to an envelope")
        envelope = self.lines.get_by_id(line_id)
        if envelope is None:
            raise NotFoundError("LineItem", line_id)
        if envelope.period_id != period_id:
            validation.reject("Envelope belongs to a different period")
        if envelope.kind not in OUTFLOW_KINDS:
            validation.reject("Only expense and saving lines can act as envelopes")
        return line_id

    def create_transaction(
        self,
        period_id: int,
        *,
        amount: float,
        kind: str,
        name: str = "",
        envelope_line_id: Optional[int] = None,
        occurred_at: Optional[datetime] = None,
        checked_at: Optional[datetime] = None,
    ) -> Transaction:
        clean_name = validation.name(name, required=False)
        clean_amount = validation.amount(amount)
        clean_kind = validation.kind(kind)
        period = self._require_period(period_id)
        if envelope_line_id is not None:
            envelope_line_id = self._check_envelope(
                envelope_line_id, period_id=period.id, kind=clean_kind
            )

        txn = Transaction(
            period_id=period.id,
            user_id=period.user_id,
            envelope_line_id=envelope_line_id,
            name=clean_name,
            amount=clean_amount,
            kind=clean_kind,
            checked_at=None if checked_at is None else validation.timestamp(checked_at, "checked_at"),
        )
        if occurred_at is not None:
            txn.occurred_at = validation.timestamp(occurred_at, "occurred_at")

        created = self.transactions.create(txn)
        logger.info(
            "Transaction created",
            extra={"transaction_id": created.id, "period_id": period.id, "envelope_line_id": envelope_line_id},
        )
        self.propagator.propagate_from(period.id)
        return created

    def update_transaction(
        self,
        transaction_id: int,
        *,
        name: Optional[str] = None,
        amount: Optional[float] = None,
        kind: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
        period_id: Optional[int] = None,
        envelope_line_id: object = _UNCHANGED,
    ) -> Transaction:
        """Apply the given changes.

        Moving a transaction to another period drops its envelope unless a
        new envelope from the target period is given. Both periods are
        recomputed, earliest first.
        """

        txn = self._require_transaction(transaction_id)
        original_period_id = txn.period_id

        if name is not None:
            txn.name = validation.name(name, required=False)
        if amount is not None:
            txn.amount = validation.amount(amount)
        if kind is not None:
            txn.kind = validation.kind(kind)
        if occurred_at is not None:
            txn.occurred_at = validation.timestamp(occurred_at, "occurred_at")
        if period_id is not None and period_id != txn.period_id:
            target = self._require_period(period_id)
            if target.user_id != txn.user_id:
                validation.reject("Cannot move a transaction to another user's period")
            txn.period_id = target.id
            if envelope_line_id is _UNCHANGED:
                envelope_line_id = None

        if envelope_line_id is not _UNCHANGED:
            txn.envelope_line_id = (
                None
                if envelope_line_id is None
                else self._check_envelope(envelope_line_id, period_id=txn.period_id, kind=txn.kind)
            )
        elif txn.envelope_line_id is not None and txn.kind not in OUTFLOW_KINDS:
            validation.reject("Only expense and saving transactions can be allocated to an envelope")

        updated = self.transactions.update(txn)
        self.propagator.propagate_from(original_period_id, updated.period_id)
        return updated

    def delete_transaction(self, transaction_id: int) -> None:
        txn = self._require_transaction(transaction_id)
        self.transactions.delete(txn.id)
        logger.info("Transaction deleted", extra={"transaction_id": txn.id, "period_id": txn.period_id})
        self.propagator.propagate_from(txn.period_id)

    def toggle_check(self, transaction_id: int, *, as_of: datetime) -> Transaction:
        """Mark the transaction realized at ``as_of``, or clear the mark if already set."""

        stamp = validation.as_of(as_of)
        txn = self._require_transaction(transaction_id)
        txn.checked_at = None if txn.checked_at is not None else stamp
        updated = self.transactions.update(txn)
        self.propagator.propagate_from(updated.period_id)
        return updated
