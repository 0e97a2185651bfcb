"""Date parsing utilities."""

from datetime import date
from dateutil import parser as date_parser

from smallbooks.domain.errors import InvalidDate


def parse_date(date_str: str, dayfirst: bool = False) -> date:
    """Parse a date string into a date object.

    Accepts anything python-dateutil understands: "2024-01-15",
    "01/15/2024", "Jan 15, 2024", "15.01.2024" (with dayfirst=True), etc.

    Args:
        date_str: Date string in various formats
        dayfirst: Read ambiguous dates such as 03/04/2024 as day first

    Returns:
        Date object

    Raises:
        InvalidDate: If date string cannot be parsed
    """
    try:
        dt = date_parser.parse(date_str.strip(), dayfirst=dayfirst)
    except (ValueError, OverflowError, TypeError, AttributeError):
        raise InvalidDate(f"Invalid date: {date_str}")
    return dt.date()
