"""SQLModel implementation of the LineItem repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session

from ...models.line_item import LineItem
from ..database import storage_errors


class SQLModelLineItemRepository:
    """SQLModel-based line item repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, line_id: int) -> Optional[LineItem]:
        """Retrieve a line by ID."""
        with storage_errors("get_line"), self.session_factory() as session:
            line = session.get(LineItem, line_id)
            if line:
                session.expunge(line)
            return line

    def create(self, line: LineItem) -> LineItem:
        """Create a new line."""
        with storage_errors("create_line"), self.session_factory() as session:
            session.add(line)
            session.commit()
            session.refresh(line)
            session.expunge(line)
            return line

    def update(self, line: LineItem) -> LineItem:
        """Update an existing line."""
        with storage_errors("update_line"), self.session_factory() as session:
            line = session.merge(line)
            session.commit()
            session.refresh(line)
            session.expunge(line)
            return line

    def delete(self, line_id: int) -> None:
        """Delete a line by ID."""
        with storage_errors("delete_line"), self.session_factory() as session:
            line = session.get(LineItem, line_id)
            if line:
                session.delete(line)
                session.commit()
