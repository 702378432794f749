"""Exception types raised by carryover services and repositories."""

from __future__ import annotations


class CarryoverError(Exception):
    """Base class for all carryover errors."""


class ValidationError(CarryoverError, ValueError):
    """Malformed input to a public operation; nothing was written."""


class NotFoundError(CarryoverError, LookupError):
    """A referenced period, line, transaction or template line does not exist."""

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(f"{entity} {identifier!r} not found")
        self.entity = entity
        self.identifier = identifier


class StorageError(CarryoverError):
    """A repository read or write failed."""
