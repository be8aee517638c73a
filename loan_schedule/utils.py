"""Utility functions for the loan schedule calculator.

This module provides helpers for parsing user input into Python data types
and for handling dates, including adding months and stepping from one payment
period to the next. The ``coerce_*`` helpers implement the lenient policy of
form front ends, where a blank or malformed field counts as zero; the strict
parsers raise ``ValueError`` instead.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation, getcontext
from typing import Optional, Tuple

getcontext().prec = 28  # increase decimal precision to avoid rounding errors


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM`` or ``YYYY-MM-DD`` string into a ``date``.

    A missing day defaults to the first of the month.

    Raises
    ------
    ValueError
        If the string is not a valid date.
    """
    try:
        parts = value.strip().split("-")
        if len(parts) not in (2, 3):
            raise ValueError
        year = int(parts[0])
        month = int(parts[1])
        day = int(parts[2]) if len(parts) == 3 else 1
        return date(year, month, day)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid date string: {value}") from exc


def add_months(dt: date, months: int) -> date:
    """Return a new date a number of months after ``dt``.

    The day of the month is clamped to the last valid day if needed (e.g.,
    adding one month to Jan 31 yields Feb 28 or 29).
    """
    year = dt.year + (dt.month - 1 + months) // 12
    month = (dt.month - 1 + months) % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def period_date(start: date, offset: int, payments_per_year: int) -> date:
    """Return the date of the period ``offset`` steps after ``start``.

    Frequencies that divide a year into whole months (monthly, quarterly,
    ...) step by ``12 / payments_per_year`` months. Others (bi-weekly,
    weekly) step by ``round(365 / payments_per_year)`` days. Dates are always
    computed from ``start`` so that month-end clamping does not drift.
    """
    if 12 % payments_per_year == 0:
        return add_months(start, offset * (12 // payments_per_year))
    return start + timedelta(days=offset * round(365 / payments_per_year))


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips whitespace and thousands separators. It raises
    ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.strip().replace(",", "")
        result = Decimal(cleaned)
    except (AttributeError, InvalidOperation) as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc
    if not result.is_finite():
        raise ValueError(f"Invalid numeric value: {value}")
    return result


def parse_amount(value: str) -> Decimal:
    """Parse an amount with optional ``k``/``m`` suffixes.

    Accepts plain numbers ("500000") and shorthand like "500k" (500 000) or
    "1.2m" (1 200 000).
    """
    cleaned = value.strip().lower()
    factor = Decimal(1)
    if cleaned.endswith("k"):
        factor = Decimal(1_000)
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = Decimal(1_000_000)
        cleaned = cleaned[:-1]
    return decimal_from_str(cleaned) * factor


def parse_period_pair(value: str) -> Tuple[int, Decimal]:
    """Parse a ``PERIOD:VALUE`` pair such as ``"61:7.0"`` or ``"12:5k"``."""
    parts = value.split(":")
    if len(parts) != 2:
        raise ValueError(f"Expected PERIOD:VALUE, got {value}")
    period_str, amount_str = parts
    try:
        period = int(period_str.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid period number: {period_str}") from exc
    return period, parse_amount(amount_str)


def coerce_decimal(value: Optional[str]) -> Decimal:
    """Return ``value`` as a ``Decimal``, treating blank or invalid input as zero."""
    if value is None:
        return Decimal("0")
    try:
        return parse_amount(value)
    except ValueError:
        return Decimal("0")


def coerce_int(value: Optional[str]) -> int:
    """Return ``value`` as an ``int``, treating blank or invalid input as zero.

    Fractional input is truncated toward zero.
    """
    return int(coerce_decimal(value))
