"""Date and month-period parsing utilities."""

import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from dateutil import parser as date_parser

_MONTH_TOKEN = re.compile(r"^(\d{4})-(\d{1,2})$")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Accepts ISO dates ("2024-01-15"), ISO timestamps ("2024-01-15T00:00:00Z",
    as the gateway may return), free-form dates ("January 15, 2024") and the
    relative words "today", "yesterday" and "tomorrow".

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in relative_dates:
        return relative_dates[text]

    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    try:
        return date_parser.parse(text).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def to_date(value: Any) -> date:
    """Coerce a date, datetime or string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(str(value))


def format_date(value: date) -> str:
    """Render a date as the ISO calendar-date string used at every boundary."""
    return value.isoformat()


def current_month(today: Optional[date] = None) -> str:
    """Return the current year-month period token, e.g. '2025-01'."""
    today = today or date.today()
    return f"{today.year:04d}-{today.month:02d}"


def normalize_month(value: str) -> str:
    """Normalize a month token to YYYY-MM.

    Accepts "2025-1", "2025-01" or anything parse_date understands
    ("January 2025", "2025-01-31").

    Raises:
        ValueError: If the value cannot be read as a month
    """
    text = value.strip()
    match = _MONTH_TOKEN.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if 1 <= month <= 12:
            return f"{year:04d}-{month:02d}"
        raise ValueError(f"Invalid month '{value}': expected YYYY-MM")

    try:
        parsed = date_parser.parse(text, default=datetime(date.today().year, 1, 1))
    except (ValueError, TypeError, OverflowError):
        raise ValueError(f"Invalid month '{value}': expected YYYY-MM")
    return f"{parsed.year:04d}-{parsed.month:02d}"
