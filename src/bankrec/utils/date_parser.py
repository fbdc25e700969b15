"""Date parsing utilities."""

import re
from datetime import date, datetime, timedelta
from dateutil import parser as date_parser

_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")
_DMY_TIMESTAMP = re.compile(r"^\d{1,2}/\d{1,2}/\d{4} \d{1,2}:\d{2}$")


def parse_statement_timestamp(value: str) -> datetime:
    """Parse a bank statement timestamp.

    Exactly two layouts are accepted:
    - "YYYY-MM-DD HH:MM:SS"
    - "DD/MM/YYYY HH:MM"

    Anything else is an error; there is no fallback guessing, since a
    day/month swap silently corrupts matching.

    Args:
        value: Timestamp string from the statement

    Returns:
        Naive datetime

    Raises:
        ValueError: If the value is empty or in neither layout
    """
    if value is None or not value.strip():
        raise ValueError("Invalid date string: empty")

    value = value.strip()
    try:
        if _ISO_TIMESTAMP.match(value):
            return datetime.strptime(value, "%Y-%m-%d %H:%M:%S")
        if _DMY_TIMESTAMP.match(value):
            return datetime.strptime(value, "%d/%m/%Y %H:%M")
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}': {e}")
    raise ValueError(
        f"Unable to parse date '{value}': expected YYYY-MM-DD HH:MM:SS or DD/MM/YYYY HH:MM"
    )


def parse_date(date_str: str) -> date:
    """Parse a user-supplied date string into a date object.

    Used for manual ledger entry, so it is lenient:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")
