"""Template repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.template import TemplateLine


class TemplateRepository(Protocol):
    """Read access to template lines."""

    def get_line_by_id(self, template_line_id: int) -> Optional[TemplateLine]:
        """Get a specific template line."""
        ...
