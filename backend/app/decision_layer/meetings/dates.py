"""Date helpers for meeting resolution"""

import re
from datetime import datetime, timedelta
from typing import Optional, Tuple

MONTHS: dict[str, int] = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_MONTH_DAY = re.compile(r"^(\w+)\s+(\d{1,2})(?:,?\s*(\d{4}))?$", re.IGNORECASE)
_NUMERIC = re.compile(r"^(\d{1,2})[/\-](\d{1,2})(?:[/\-](\d{2,4}))?$")


def parse_date_reference(value: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse "Aug 7", "August 7, 2025", "8/7" or "8/7/25" (month first)

    A missing year defaults to the current year; two-digit years are 20xx.
    Returns None when the text is not a valid date.
    """
    now = now or datetime.now()
    text = value.strip()

    match = _MONTH_DAY.match(text)
    if match:
        month = MONTHS.get(match.group(1).lower())
        if month is None:
            return None
        year = int(match.group(3)) if match.group(3) else now.year
        return _safe_date(year, month, int(match.group(2)))

    match = _NUMERIC.match(text)
    if match:
        year = int(match.group(3)) if match.group(3) else now.year
        if year < 100:
            year += 2000
        return _safe_date(year, int(match.group(1)), int(match.group(2)))

    return None


def _safe_date(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def day_bounds(day: datetime) -> Tuple[datetime, datetime]:
    """Start and end (inclusive) of the calendar day"""
    start = day.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1) - timedelta(microseconds=1)


def last_days_range(days: int, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """From midnight ``days`` days ago until now"""
    now = now or datetime.now()
    start = (now - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)
    return start, now


def last_week_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    return last_days_range(7, now)


def last_month_range(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    return last_days_range(30, now)


def format_date(value: datetime) -> str:
    """Display form, e.g. "Aug 7, 2025" """
    return f"{value.strftime('%b')} {value.day}, {value.year}"
