"""Input checks shared by the line and transaction services."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import NoReturn

from ..domain.records import KINDS, RECURRENCES, is_rollover_id
from ..errors import ValidationError
from ..logging_config import get_logger

logger = get_logger("validation")

NAME_MAX_LENGTH = 100


def reject(message: str) -> NoReturn:
    logger.warning("Rejected input: %s", message)
    raise ValidationError(message)


def require_id(value: object, label: str) -> int:
    """Ids of stored rows are positive ints; rollover ids are never editable."""

    if is_rollover_id(value):
        reject(f"{label} refers to a rollover line, which cannot be edited or allocated to")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        reject(f"{label} is required")
    return value


def amount(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        reject("Amount must be a number")
    result = float(value)
    if math.isnan(result) or math.isinf(result):
        reject("Amount must be finite")
    if result < 0:
        reject("Amount must not be negative")
    return result


def kind(value: object) -> str:
    if value not in KINDS:
        reject(f"Kind must be one of {sorted(KINDS)}, got {value!r}")
    return value  # type: ignore[return-value]


def recurrence(value: object) -> str:
    if value not in RECURRENCES:
        reject(f"Recurrence must be one of {sorted(RECURRENCES)}, got {value!r}")
    return value  # type: ignore[return-value]


def name(value: object, *, required: bool = True) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if required and not text:
        reject("Name is required")
    if len(text) > NAME_MAX_LENGTH:
        reject(f"Name cannot exceed {NAME_MAX_LENGTH} characters")
    return text


def timestamp(value: object, label: str) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken to be UTC."""

    if not isinstance(value, datetime):
        reject(f"{label} must be a datetime")
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def as_of(value: object) -> datetime:
    if not isinstance(value, datetime):
        reject("An explicit as_of datetime is required")
    return timestamp(value, "as_of")
