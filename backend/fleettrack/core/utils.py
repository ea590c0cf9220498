"""
Utility functions for the application.
"""
from typing import Any, Optional
from datetime import date, datetime
import math


def to_number(value: Any) -> float:
    """
    Coerce a stored or submitted value to float.
    Missing, non-numeric and non-finite values count as zero.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def parse_number(value: Any) -> Optional[float]:
    """Parse a value as a finite float, or return None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_datetime(value: Any) -> Optional[datetime]:
    """Normalize a date or datetime to a naive datetime."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    raise TypeError(f"Type {type(value)} is not a date")


def to_date(value: Any) -> Optional[date]:
    """Reduce a date or datetime to its calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Type {type(value)} is not a date")


def days_between(earlier: Any, later: Any) -> int:
    """Whole days between two dates, rounding partial days up."""
    delta = to_datetime(later) - to_datetime(earlier)
    return math.ceil(delta.total_seconds() / 86400)


def format_km(value: float) -> str:
    """Format a kilometre figure with thousands separators."""
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}"
