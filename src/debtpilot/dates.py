"""Calendar and money helpers shared by the services."""

from __future__ import annotations

import math
from calendar import monthrange
from datetime import date, datetime
from typing import Any

from .exceptions import InvalidDateError


def to_date(value: Any) -> date:
    """Convert a store value into a plain calendar date.

    Accepts ``date``/``datetime`` (including pandas timestamps), ISO strings and
    provider timestamp wrappers exposing ``to_date()`` or ``toDate()``.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    for attr in ("to_date", "toDate", "to_datetime"):
        converter = getattr(value, attr, None)
        if callable(converter):
            return to_date(converter())
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise InvalidDateError(f"Cannot interpret {value!r} as a date")


def days_apart(first: Any, second: Any) -> int:
    """Absolute number of calendar days between two date-like values."""

    return abs((to_date(first) - to_date(second)).days)


def add_months(start: date, months: int) -> date:
    """Return ``start`` shifted by whole calendar months.

    The day is clamped to the last day of the target month, so Jan 31 + 1
    month is Feb 28 (or 29).
    """

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def require_finite(
    name: str, value: Any, *, error: type[ValueError] = ValueError
) -> float:
    """Return ``value`` as float, rejecting NaN, infinities and non-numbers."""

    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise error(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise error(f"{name} must be a finite number, got {value!r}")
    return number


def format_currency(amount: float, symbol: str = "$") -> str:
    """Render an amount the way insight messages show it (``$1,234.50``)."""

    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
