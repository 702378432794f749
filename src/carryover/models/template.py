"""Budget templates that line items can be reset from."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..domain.records import RECURRENCE_FIXED


class BudgetTemplate(SQLModel, table=True):
    """Reusable set of planned lines."""

    __tablename__: ClassVar[str] = "budget_template"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)

    lines: list["TemplateLine"] = Relationship(
        back_populates="template",
        sa_relationship=relationship("TemplateLine", back_populates="template"),
    )


class TemplateLine(SQLModel, table=True):
    """Template entry a period's line item may be linked to."""

    __tablename__: ClassVar[str] = "template_line"

    id: Optional[int] = Field(default=None, primary_key=True)
    template_id: int = Field(foreign_key="budget_template.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)
    kind: str = Field(nullable=False, max_length=16)
    amount: float = Field(nullable=False, ge=0)
    recurrence: str = Field(default=RECURRENCE_FIXED, nullable=False, max_length=16)

    template: "BudgetTemplate" = Relationship(
        back_populates="lines",
        sa_relationship=relationship("BudgetTemplate", back_populates="lines"),
    )
