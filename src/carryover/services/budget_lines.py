"""Line item mutations. Each successful write triggers a rollover cascade."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..domain.records import RECURRENCE_ONE_OFF
from ..domain.repositories import (
    LineItemRepository,
    PeriodRepository,
    TemplateRepository,
    TransactionRepository,
)
from ..errors import NotFoundError, ValidationError
from ..logging_config import get_logger
from ..models.line_item import LineItem
from ..models.period import Period
from ..models.transaction import Transaction
from . import validation
from .rollover import RolloverPropagator

logger = get_logger("budget_lines")


@dataclass
class BudgetLineService:
    """Create, edit, check and delete planned lines."""

    lines: LineItemRepository
    periods: PeriodRepository
    transactions: TransactionRepository
    templates: TemplateRepository
    propagator: RolloverPropagator

    def _require_period(self, period_id: object) -> Period:
        period = self.periods.get_period_by_id(validation.require_id(period_id, "Period id"))
        if period is None:
            raise NotFoundError("Period", period_id)
        return period

    def _require_line(self, line_id: object) -> LineItem:
        line = self.lines.get_by_id(validation.require_id(line_id, "Line id"))
        if line is None:
            raise NotFoundError("LineItem", line_id)
        return line

    def create_line(
        self,
        period_id: int,
        *,
        name: str,
        amount: float,
        kind: str,
        recurrence: str = RECURRENCE_ONE_OFF,
        template_line_id: Optional[int] = None,
        is_manually_adjusted: bool = False,
    ) -> LineItem:
        fields = {
            "name": validation.name(name),
            "amount": validation.amount(amount),
            "kind": validation.kind(kind),
            "recurrence": validation.recurrence(recurrence),
            "is_manually_adjusted": bool(is_manually_adjusted),
        }
        period = self._require_period(period_id)
        if template_line_id is not None and self.templates.get_line_by_id(template_line_id) is None:
            raise NotFoundError("TemplateLine", template_line_id)

        created = self.lines.create(
            LineItem(
                period_id=period.id,
                user_id=period.user_id,
                template_line_id=template_line_id,
                **fields,
            )
        )
        logger.info("Line created", extra={"line_id": created.id, "period_id": period.id})
        self.propagator.propagate_from(period.id)
        return created

    def update_line(
        self,
        line_id: int,
        *,
        name: Optional[str] = None,
        amount: Optional[float] = None,
        kind: Optional[str] = None,
        recurrence: Optional[str] = None,
        is_manually_adjusted: Optional[bool] = None,
    ) -> LineItem:
        """Apply the given changes; arguments left as None are kept."""

        line = self._require_line(line_id)
        if name is not None:
            line.name = validation.name(name)
        if kind is not None:
            line.kind = validation.kind(kind)
        if recurrence is not None:
            line.recurrence = validation.recurrence(recurrence)
        if amount is not None:
            new_amount = validation.amount(amount)
            # Editing a template-backed amount pins it against template resets.
            if line.template_line_id is not None and new_amount != line.amount:
                line.is_manually_adjusted = True
            line.amount = new_amount
        if is_manually_adjusted is not None:
            line.is_manually_adjusted = bool(is_manually_adjusted)

        updated = self.lines.update(line)
        self.propagator.propagate_from(updated.period_id)
        return updated

    def delete_line(self, line_id: int) -> None:
        """Delete a line; transactions allocated to it become free transactions."""

        line = self._require_line(line_id)
        released = self.transactions.release_envelope(line.id)
        self.lines.delete(line.id)
        logger.info(
            "Line deleted",
            extra={"line_id": line.id, "period_id": line.period_id, "released_transactions": released},
        )
        self.propagator.propagate_from(line.period_id)

    def toggle_check(self, line_id: int, *, as_of: datetime) -> LineItem:
        """Mark the line realized at ``as_of``, or clear the mark if already set."""

        stamp = validation.as_of(as_of)
        line = self._require_line(line_id)
        line.checked_at = None if line.checked_at is not None else stamp
        updated = self.lines.update(line)
        self.propagator.propagate_from(updated.period_id)
        return updated

    def check_transactions(self, line_id: int, *, as_of: datetime) -> list[Transaction]:
        """Stamp ``as_of`` on every unchecked transaction allocated to the line."""

        stamp = validation.as_of(as_of)
        line = self._require_line(line_id)
        checked: list[Transaction] = []
        for txn in self.transactions.list_for_envelope(line.id):
            if txn.checked_at is not None:
                continue
            txn.checked_at = stamp
            checked.append(self.transactions.update(txn))
        if checked:
            self.propagator.propagate_from(line.period_id)
        return checked

    def reset_from_template(self, line_id: int) -> LineItem:
        """Restore name, amount, kind and recurrence from the linked template line."""

        line = self._require_line(line_id)
        if line.template_line_id is None:
            raise ValidationError(f"Line {line.id} is not linked to a template line")
        template_line = self.templates.get_line_by_id(line.template_line_id)
        if template_line is None:
            raise NotFoundError("TemplateLine", line.template_line_id)

        line.name = template_line.name
        line.amount = template_line.amount
        line.kind = template_line.kind
        line.recurrence = template_line.recurrence
        line.is_manually_adjusted = False
        updated = self.lines.update(line)
        self.propagator.propagate_from(updated.period_id)
        return updated
