"""
Timestamp and calendar-month helpers.

Every timestamp the portal writes is a zero-padded ``YYYY-MM-DD HH:MM:SS``
string, so plain string comparison orders rows chronologically on both
database backends.
"""

import re
from datetime import date, datetime
from typing import Optional, Tuple, Union

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
_LOOSE_TIMESTAMP_RE = re.compile(
    r"^\s*(\d{4})[-/](\d{1,2})[-/](\d{1,2})"
    r"(?:[ T](\d{1,2}):(\d{1,2})(?::(\d{1,2}))?(?:\.\d+)?)?"
    r"\s*(?:Z|[+-]\d{2}:?\d{2})?\s*$"
)


def format_timestamp(value: datetime) -> str:
    return value.strftime(TIMESTAMP_FORMAT)


def now_timestamp() -> str:
    """Current local time in the canonical storage format."""
    return format_timestamp(datetime.now())


def normalize_timestamp(value: Union[str, datetime, date, None]) -> Optional[str]:
    """
    Bring a stored timestamp into the canonical zero-padded format.

    Accepts legacy variants such as ``2025/1/5``, ``2025-1-5 9:03:00``,
    ISO strings with a ``T`` separator, fractional seconds or a UTC offset
    (the offset is dropped, the wall-clock time is kept).

    Raises:
        ValueError: if the value is not recognisable as a date.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return format_timestamp(value)
    if isinstance(value, date):
        return format_timestamp(datetime(value.year, value.month, value.day))

    match = _LOOSE_TIMESTAMP_RE.match(str(value))
    if not match:
        raise ValueError(f"Unrecognised timestamp: {value!r}")
    parts = [int(p) if p is not None else 0 for p in match.groups()]
    return format_timestamp(datetime(*parts))


def parse_month(value: Optional[str], today: Optional[date] = None) -> Tuple[int, int]:
    """
    Parse ``YYYY-MM`` into (year, month); None means the current month.

    Raises:
        ValueError: on a malformed month.
    """
    if not value:
        today = today or date.today()
        return today.year, today.month

    match = _MONTH_RE.match(value.strip())
    if not match:
        raise ValueError(f"Month must be in YYYY-MM format, got {value!r}")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {value!r}")
    return year, month


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a calendar month by ``delta`` months (negative goes back)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_label(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_range(year: int, month: int) -> Tuple[str, str]:
    """Half-open range [first day of month, first day of next month)."""
    next_year, next_month = shift_month(year, month, 1)
    start = f"{year:04d}-{month:02d}-01 00:00:00"
    end = f"{next_year:04d}-{next_month:02d}-01 00:00:00"
    return start, end
