"""SQLModel table exports."""

from .line_item import LineItem
from .period import Period
from .template import BudgetTemplate, TemplateLine
from .transaction import Transaction
from .user import User

__all__ = [
    "BudgetTemplate",
    "LineItem",
    "Period",
    "TemplateLine",
    "Transaction",
    "User",
]
