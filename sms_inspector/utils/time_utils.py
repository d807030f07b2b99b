"""
sms_inspector/utils/time_utils.py

Purpose: Date and timestamp helpers

- Premiumy filter boundaries (whole days)
- Parsing MDR datetimes for chronological sorting
"""

from datetime import date, datetime, timezone
from typing import Optional

FILTER_DAY_START = "%Y-%m-%d 00:00:00"
FILTER_DAY_END = "%Y-%m-%d 23:59:59"

# Formats seen in MDR datetime columns, most common first
RECORD_DATETIME_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M",
    "%d.%m.%Y %H:%M:%S",
    "%Y-%m-%d",
)


def format_filter_start(day: date) -> str:
    """
    Formats the first second of a day for the Premiumy filter.
    """
    return day.strftime(FILTER_DAY_START)


def format_filter_end(day: date) -> str:
    """
    Formats the last second of a day for the Premiumy filter.
    """
    return day.strftime(FILTER_DAY_END)


def parse_record_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parses an MDR datetime string.

    Returns:
        Naive datetime, or None when the value matches no known format
    """
    if not value:
        return None
    value = value.strip()
    for fmt in RECORD_DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        # Offset-aware values are compared in UTC
        parsed = parsed.astimezone(timezone.utc)
    return parsed.replace(tzinfo=None)
