"""Repository protocol definitions for domain layer."""

from .line_item import LineItemRepository
from .period import PeriodRepository
from .template import TemplateRepository
from .transaction import TransactionRepository

__all__ = [
    "LineItemRepository",
    "PeriodRepository",
    "TemplateRepository",
    "TransactionRepository",
]
