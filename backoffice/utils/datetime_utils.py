"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

import re
from datetime import UTC, datetime

_MONTH_PATTERN = re.compile(r"\d{4}-\d{2}")


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def month_bounds(month: str) -> tuple[datetime, datetime]:
    """
    Get [start, end) UTC bounds of a calendar month.

    Args:
        month: Month in YYYY-MM format

    Returns:
        Tuple of (first instant of month, first instant of next month)

    Raises:
        ValueError: If month is not a valid YYYY-MM string
    """
    if not isinstance(month, str) or not _MONTH_PATTERN.fullmatch(month):
        raise ValueError(f"Invalid month: {month!r}")
    start = datetime.strptime(month, "%Y-%m").replace(tzinfo=UTC)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end
