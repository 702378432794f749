"""Envelope reconciliation of planned lines against allocated transactions.

Every expense or saving line is an envelope. Transactions allocated to it
are summed and compared with its planned amount: the envelope counts for
whichever is larger, so a transaction never gets counted on top of the
planned amount it was drawn from. Transactions without a usable envelope
("free" transactions) count in full.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..domain.records import OUTFLOW_KINDS, is_rollover


@dataclass(slots=True)
class EnvelopeUsage:
    """Per-envelope breakdown used for display."""

    line_id: object
    planned: float
    consumed: float

    @property
    def contribution(self) -> float:
        return max(self.planned, self.consumed)

    @property
    def remaining(self) -> float:
        return max(self.planned - self.consumed, 0.0)

    @property
    def overage(self) -> float:
        return max(self.consumed - self.planned, 0.0)


def _is_outflow(item) -> bool:
    return item.kind in OUTFLOW_KINDS


def _envelopes(lines: Iterable) -> dict[object, float]:
    """Map id -> planned amount for every line that can act as an envelope."""

    envelopes: dict[object, float] = {}
    for line in lines:
        if not _is_outflow(line) or is_rollover(line):
            continue
        line_id: Optional[object] = getattr(line, "id", None)
        if line_id is None:
            # Unsaved lines cannot be referenced, but they still plan spending.
            line_id = ("unsaved", len(envelopes))
        envelopes[line_id] = envelopes.get(line_id, 0.0) + float(line.amount)
    return envelopes


def _partition(
    envelopes: dict[object, float], transactions: Iterable
) -> tuple[dict[object, float], float]:
    """Split outflow transactions into per-envelope consumption and the free total."""

    consumed: dict[object, float] = {}
    free_total = 0.0
    for txn in transactions:
        if not _is_outflow(txn):
            continue
        envelope_id = getattr(txn, "envelope_line_id", None)
        if envelope_id is not None and envelope_id in envelopes:
            consumed[envelope_id] = consumed.get(envelope_id, 0.0) + float(txn.amount)
        else:
            # Unallocated, or pointing at a missing/rollover/income line.
            free_total += float(txn.amount)
    return consumed, free_total


def envelope_usage(lines: Iterable, transactions: Iterable) -> list[EnvelopeUsage]:
    """Return planned vs consumed figures for every envelope, in line order."""

    envelopes = _envelopes(lines)
    consumed, _ = _partition(envelopes, transactions)
    return [
        EnvelopeUsage(line_id=line_id, planned=planned, consumed=consumed.get(line_id, 0.0))
        for line_id, planned in envelopes.items()
    ]


def reconcile_expenses(lines: Iterable, transactions: Iterable) -> float:
    """Total expenses with envelope semantics.

    ``sum(max(envelope.amount, consumed(envelope))) + sum(free.amount)``
    """

    envelopes = _envelopes(lines)
    consumed, free_total = _partition(envelopes, transactions)
    envelope_total = sum(
        max(planned, consumed.get(line_id, 0.0)) for line_id, planned in envelopes.items()
    )
    return envelope_total + free_total
