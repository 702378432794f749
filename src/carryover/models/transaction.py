"""SQLModel definitions for actual money movements."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .period import Period


class Transaction(SQLModel, table=True):
    """A single income, expense or saving that actually happened.

    ``envelope_line_id`` is a back-reference to the line the spend was
    allocated against; null means a free transaction.
    """

    __tablename__: ClassVar[str] = "budget_transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    period_id: int = Field(foreign_key="period.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    envelope_line_id: Optional[int] = Field(default=None, foreign_key="line_item.id", index=True)
    name: str = Field(default="", max_length=100)
    kind: str = Field(nullable=False, max_length=16)
    amount: float = Field(nullable=False, ge=0)
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    checked_at: Optional[datetime] = Field(default=None)

    period: "Period" = Relationship(
        back_populates="transactions",
        sa_relationship=relationship("Period", back_populates="transactions"),
    )
