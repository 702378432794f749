"""Period repository protocol."""

from __future__ import annotations

from typing import ContextManager, Optional, Protocol

from ...models.line_item import LineItem
from ...models.period import Period
from ...models.transaction import Transaction


class PeriodRepository(Protocol):
    """Storage capability the rollover propagator runs against.

    Implementations raise ``StorageError`` when the underlying store fails.
    """

    def get_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        """Look up a user's period by calendar month."""
        ...

    def get_period_by_id(self, period_id: int) -> Optional[Period]:
        """Retrieve a period by ID."""
        ...

    def get_previous_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        """Return the stored period for the month immediately before (month, year)."""
        ...

    def get_next_period(self, user_id: int, month: int, year: int) -> Optional[Period]:
        """Return the stored period for the month immediately after (month, year)."""
        ...

    def list_line_items(self, period_id: int) -> list[LineItem]:
        """Get all line items of a period."""
        ...

    def list_transactions(self, period_id: int) -> list[Transaction]:
        """Get all transactions of a period."""
        ...

    def persist_balances(
        self, period_id: int, ending_balance: float, rollover_balance: float
    ) -> None:
        """Store the computed balances on the period row."""
        ...

    def period_lock(self, period_id: int) -> ContextManager[None]:
        """Serialize read-compute-persist against other writers of the same period."""
        ...
