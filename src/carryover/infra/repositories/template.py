"""SQLModel implementation of the Template repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session

from ...models.template import BudgetTemplate, TemplateLine
from ..database import storage_errors


class SQLModelTemplateRepository:
    """SQLModel-based template repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_line_by_id(self, template_line_id: int) -> Optional[TemplateLine]:
        """Get a specific template line."""
        with storage_errors("get_template_line"), self.session_factory() as session:
            line = session.get(TemplateLine, template_line_id)
            if line:
                session.expunge(line)
            return line

    def create(self, template: BudgetTemplate) -> BudgetTemplate:
        """Create a new template."""
        with storage_errors("create_template"), self.session_factory() as session:
            session.add(template)
            session.commit()
            session.refresh(template)
            session.expunge(template)
            return template

    def create_line(self, line: TemplateLine) -> TemplateLine:
        """Create a new template line."""
        with storage_errors("create_template_line"), self.session_factory() as session:
            session.add(line)
            session.commit()
            session.refresh(line)
            session.expunge(line)
            return line

    def update_line(self, line: TemplateLine) -> TemplateLine:
        """Update a template line."""
        with storage_errors("update_template_line"), self.session_factory() as session:
            line = session.merge(line)
            session.commit()
            session.refresh(line)
            session.expunge(line)
            return line
