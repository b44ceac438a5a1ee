"""Parsing helpers for filter values."""

from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from typing import Any

from gridfilter.core.filters.errors import FilterValueError


def is_blank(value: Any) -> bool:
    """Return True for None, whitespace-only strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (Mapping, Sequence, set)):
        return len(value) == 0
    return False


def is_missing(value: Any) -> bool:
    """Return True for an absent range bound (None or empty string)."""
    return value is None or (isinstance(value, str) and value == "")


def parse_datetime(value: Any) -> datetime:
    """Parse a date-picker bound into a datetime.

    Accepts ``datetime`` and ``date`` objects and ISO-8601 strings, including
    a trailing ``Z`` for UTC. Locale formats such as ``01/02/2021`` are not
    guessed at; callers must send ISO-8601 text.

    Raises:
        FilterValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise FilterValueError(f"Invalid date value '{value}'") from e
    raise FilterValueError(f"Invalid date value of type {type(value).__name__}")


def normalize_number(value: Any, thousands: str = "", decimal: str = ".") -> str:
    """Normalise locale-formatted number text to ``1234.56`` form.

    The thousands separator is removed first, then the decimal separator is
    replaced with ``.``.

    Example:
        >>> normalize_number("1.234,56", thousands=".", decimal=",")
        '1234.56'
    """
    text = str(value).strip()
    if thousands:
        text = text.replace(thousands, "")
    if decimal and decimal != ".":
        text = text.replace(decimal, ".")
    return text


def parse_number(value: Any, thousands: str = "", decimal: str = ".") -> float:
    """Normalise and convert a number bound to float.

    Raises:
        FilterValueError: If the normalised text is not numeric.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    text = normalize_number(value, thousands=thousands, decimal=decimal)
    try:
        return float(text)
    except ValueError as e:
        raise FilterValueError(f"Invalid number value '{value}'") from e
