"""Planned allocations inside a period."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..domain.records import RECURRENCE_ONE_OFF

if TYPE_CHECKING:  # pragma: no cover
    from .period import Period


class LineItem(SQLModel, table=True):
    """Income, expense or saving planned for a period.

    Expense and saving lines double as envelopes that transactions can be
    allocated against.
    """

    __tablename__: ClassVar[str] = "line_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    period_id: int = Field(foreign_key="period.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)
    kind: str = Field(nullable=False, max_length=16)
    amount: float = Field(nullable=False, ge=0)
    recurrence: str = Field(default=RECURRENCE_ONE_OFF, nullable=False, max_length=16)
    is_manually_adjusted: bool = Field(default=False, nullable=False)
    checked_at: Optional[datetime] = Field(default=None)
    template_line_id: Optional[int] = Field(default=None, foreign_key="template_line.id")

    period: "Period" = Relationship(
        back_populates="lines",
        sa_relationship=relationship("Period", back_populates="lines"),
    )

    @property
    def is_rollover(self) -> bool:
        return False
