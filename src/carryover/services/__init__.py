"""Service module exports."""

from . import (
    budget_lines,
    envelopes,
    metrics,
    overview,
    periods,
    rollover,
    transactions,
    validation,
)

__all__ = [
    "budget_lines",
    "envelopes",
    "metrics",
    "overview",
    "periods",
    "rollover",
    "transactions",
    "validation",
]
