"""Utility functions for the land deal planner.

This module provides helpers for turning raw user input into Python data
types, for converting land areas between the local measurement units and for
handling dates, including adding calendar months and day/month durations.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, getcontext
import calendar
from typing import Union

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

# Units per Vigha. Every conversion goes through Vigha.
CONVERSION_RATES = {
    "Vigha": Decimal("1"),
    "SqMeter": Decimal("2377.73"),
    "Vaar": Decimal("2843.71"),
    "Guntha": Decimal("23.50"),
    "SqKm": Decimal("4.00"),
}

SQ_MT_PER_VIGHA = CONVERSION_RATES["SqMeter"]

NumberLike = Union[str, int, float, Decimal, None]


def parse_optional_number(raw: NumberLike) -> Decimal:
    """Coerce a raw input value to a ``Decimal``, defaulting to zero.

    Blank strings, ``None`` and anything that is not a number become
    ``Decimal("0")``. Thousands separators are stripped, so ``"1,25,000"``
    parses as ``125000``. This function never raises.
    """
    if raw is None or isinstance(raw, bool):
        return Decimal("0")
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else Decimal("0")
    if isinstance(raw, int):
        return Decimal(raw)
    if isinstance(raw, float):
        if raw != raw or raw in (float("inf"), float("-inf")):
            return Decimal("0")
        return Decimal(str(raw))
    cleaned = str(raw).replace(",", "").strip()
    if not cleaned:
        return Decimal("0")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def decimal_from_str(value: str) -> Decimal:
    """Convert a numeric string into a ``Decimal``.

    The function strips any commas and handles both integer and float-like
    strings. It raises ``ValueError`` if conversion fails.
    """
    try:
        cleaned = value.replace(",", "")
        return Decimal(cleaned)
    except Exception as exc:
        raise ValueError(f"Invalid numeric value: {value}") from exc


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """Round ``value`` to ``places`` decimals, halves rounding away from zero."""
    quantum = Decimal(1).scaleb(-places)
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string into a ``date`` object.

    A trailing time component (``2024-01-31T12:00:00``) is ignored.

    Raises
    ------
    ValueError
        If the string is not a valid calendar date.
    """
    try:
        return date.fromisoformat(value.strip().split("T")[0])
    except Exception as exc:
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


def add_days(dt: date, days: int) -> date:
    return dt + timedelta(days=days)


def add_duration(dt: date, value: NumberLike, unit: str) -> date:
    """Advance ``dt`` by ``value`` days or months.

    Fractional values are truncated to whole units.
    """
    amount = int(parse_optional_number(value))
    if unit == "Days":
        return add_days(dt, amount)
    if unit == "Months":
        return add_months(dt, amount)
    raise ValueError(f"Unknown duration unit: {unit}")


def convert_area(value: Decimal, from_unit: str, to_unit: str) -> Decimal:
    """Convert an area between two of the supported land units."""
    try:
        in_vigha = value / CONVERSION_RATES[from_unit]
        return in_vigha * CONVERSION_RATES[to_unit]
    except KeyError as exc:
        raise ValueError(f"Unknown area unit: {exc.args[0]}") from exc


def vigha_equivalent(area_sq_mt: Decimal) -> Decimal:
    return area_sq_mt / SQ_MT_PER_VIGHA
