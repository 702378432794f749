"""Line item repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.line_item import LineItem


class LineItemRepository(Protocol):
    """Repository for managing planned lines."""

    def get_by_id(self, line_id: int) -> Optional[LineItem]:
        """Retrieve a line by ID."""
        ...

    def create(self, line: LineItem) -> LineItem:
        """Create a new line."""
        ...

    def update(self, line: LineItem) -> LineItem:
        """Update an existing line."""
        ...

    def delete(self, line_id: int) -> None:
        """Delete a line by ID."""
        ...
