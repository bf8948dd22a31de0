"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", ISO timestamps)
    and the relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip()
    keyword = date_str.lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if keyword in relative_dates:
        return relative_dates[keyword]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_optional_date(value: Any) -> Optional[date]:
    """Parse a stored date value, treating empty values as absent.

    Accepts ``date``/``datetime`` instances as well as strings.

    Raises:
        ValueError: If a non-empty value cannot be parsed
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Could not parse date {value!r}")
    return parse_date(value)


def format_date(value: Optional[date]) -> Optional[str]:
    """Render a date as ``YYYY-MM-DD`` (None stays None)."""
    if value is None:
        return None
    return value.isoformat()
