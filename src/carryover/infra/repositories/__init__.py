"""Concrete repository implementations using SQLModel."""

from .line_item import SQLModelLineItemRepository
from .period import SQLModelPeriodRepository
from .template import SQLModelTemplateRepository
from .transaction import SQLModelTransactionRepository

__all__ = [
    "SQLModelLineItemRepository",
    "SQLModelPeriodRepository",
    "SQLModelTemplateRepository",
    "SQLModelTransactionRepository",
]
