"""Month arithmetic for the period chain."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Protocol, Union

from ..config import PAY_DAY_MAX, PAY_DAY_MIN
from ..errors import ValidationError


class MonthKeyed(Protocol):
    month: int
    year: int


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month}")


def previous_month(month: int, year: int) -> tuple[int, int]:
    """Return (month, year) of the month before, wrapping at January."""

    _check_month(month)
    if month == 1:
        return 12, year - 1
    return month - 1, year


def next_month(month: int, year: int) -> tuple[int, int]:
    """Return (month, year) of the month after, wrapping at December."""

    _check_month(month)
    if month == 12:
        return 1, year + 1
    return month + 1, year


def period_key(period: MonthKeyed) -> tuple[int, int]:
    """Sort key ordering periods chronologically."""

    return period.year, period.month


def compare_periods(a: MonthKeyed, b: MonthKeyed) -> int:
    """Return -1, 0 or 1 as ``a`` is before, equal to or after ``b``."""

    key_a, key_b = period_key(a), period_key(b)
    if key_a == key_b:
        return 0
    return -1 if key_a < key_b else 1


def period_for_date(as_of: Union[date, datetime], pay_day: int | None = 1) -> tuple[int, int]:
    """Return the (month, year) budget period ``as_of`` falls in.

    A period starts on ``pay_day``. Dates before the pay day belong to the
    previous month's period. When the pay day is in the second half of the
    month the period is named after the month it ends in, since that month
    holds most of its days:

    - pay_day 5: 2025-03-04 -> February 2025, 2025-03-05 -> March 2025
    - pay_day 27: 2025-01-26 -> January 2025, 2025-01-27 -> February 2025
    """

    if not pay_day or pay_day == 1:
        return as_of.month, as_of.year

    day = max(PAY_DAY_MIN, min(PAY_DAY_MAX, int(pay_day)))
    if as_of.day >= day:
        month, year = as_of.month, as_of.year
    else:
        month, year = previous_month(as_of.month, as_of.year)

    if day > 15:
        month, year = next_month(month, year)
    return month, year


def month_label(month: int, year: int) -> str:
    """Human label such as ``"March 2025"``."""

    _check_month(month)
    return f"{calendar.month_name[month]} {year}"
