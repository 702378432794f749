"""Monthly budget periods."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:  # pragma: no cover
    from .line_item import LineItem
    from .transaction import Transaction
    from .user import User


class Period(SQLModel, table=True):
    """One calendar month of one user's budget.

    ``ending_balance`` and ``rollover_balance`` stay null until the rollover
    propagator has computed them; nothing else writes them.
    """

    __tablename__: ClassVar[str] = "period"
    __table_args__ = (UniqueConstraint("user_id", "year", "month", name="uq_period_user_month"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    month: int = Field(nullable=False, ge=1, le=12)
    year: int = Field(nullable=False, index=True)
    description: str = Field(default="", max_length=255)
    ending_balance: Optional[float] = Field(default=None)
    rollover_balance: Optional[float] = Field(
        default=None, description="Cumulative carry leaving this period"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), nullable=False
    )

    lines: list["LineItem"] = Relationship(
        back_populates="period",
        sa_relationship=relationship("LineItem", back_populates="period"),
    )
    transactions: list["Transaction"] = Relationship(
        back_populates="period",
        sa_relationship=relationship("Transaction", back_populates="period"),
    )
    user: "User" = Relationship(sa_relationship=relationship("User", back_populates="periods"))
