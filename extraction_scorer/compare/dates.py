"""
Tolerant multi-format date parsing.

Documents write the same calendar date many ways ("2008-07-20",
"07/20/2008", "July 20, 2008", "20 July 2008", "JUL-20-08"). This module
reduces all of them to a datetime.date so the comparator can decide whether
two values name the same day.

Ambiguous numeric dates default to US month-first order; when the first
number cannot be a month (> 12) the day-first European reading is used.
Two-digit years below 50 are read as 20xx, the rest as 19xx.
"""

import re
from datetime import date, datetime

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
}  # fmt: skip

_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
_NUMERIC_DATE = re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{2}|\d{4})$")
_MONTH_ABBREV_DATE = re.compile(r"^([a-z]{3})[-/](\d{1,2})[-/](\d{2}|\d{4})$", re.IGNORECASE)
_MONTH_NAME_FIRST = re.compile(r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})$", re.IGNORECASE)
_DAY_FIRST = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)?\s+([a-z]+)\.?,?\s+(\d{4})$", re.IGNORECASE)
_ISO_DATETIME = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


def _expand_year(year_text: str) -> int:
    """Expand a two-digit year (49 and below = 20xx, 50+ = 19xx)."""
    year = int(year_text)
    if len(year_text) == 2:
        return 2000 + year if year < 50 else 1900 + year
    return year


def _build_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _parse_numeric(first: int, second: int, year: int) -> date | None:
    # Day-first only when the first number cannot be a month
    if first > 12:
        return _build_date(year, second, first)
    return _build_date(year, first, second)


def parse_flexible_date(text: str | None) -> date | None:
    """
    Parse a date written in any of the supported formats.

    Supported formats:
    - ISO: 2008-09-30, 2008/09/30
    - US numeric: 09/30/08, 09-30-2008
    - European numeric when day > 12: 30/09/2008
    - Month abbreviation: MAR-22-08, Mar-22-2008
    - Month name first: March 22, 2008 / May 7 2025
    - Day first: 22 March 2008
    - ISO datetime: 2008-03-22T10:00:00Z (time is dropped)

    Args:
        text: Date string

    Returns:
        Calendar date, or None if the text is not a valid date

    Example:
        >>> parse_flexible_date("07/20/2008") == parse_flexible_date("2008-07-20")
        True
        >>> parse_flexible_date("02/30/2020") is None
        True
    """
    if not text or not isinstance(text, str):
        return None

    candidate = text.strip()
    if not candidate:
        return None

    if match := _ISO_DATE.match(candidate):
        return _build_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    if match := _NUMERIC_DATE.match(candidate):
        return _parse_numeric(
            int(match.group(1)), int(match.group(2)), _expand_year(match.group(3))
        )

    if match := _MONTH_ABBREV_DATE.match(candidate):
        month = MONTHS.get(match.group(1).lower())
        if month is None:
            return None
        return _build_date(_expand_year(match.group(3)), month, int(match.group(2)))

    if match := _MONTH_NAME_FIRST.match(candidate):
        month = MONTHS.get(match.group(1).lower())
        if month is None:
            return None
        return _build_date(int(match.group(3)), month, int(match.group(2)))

    if match := _DAY_FIRST.match(candidate):
        month = MONTHS.get(match.group(2).lower())
        if month is None:
            return None
        return _build_date(int(match.group(3)), month, int(match.group(1)))

    if _ISO_DATETIME.match(candidate):
        try:
            return datetime.fromisoformat(candidate.replace("Z", "+00:00")).date()
        except ValueError:
            return None

    return None


def is_date_like(text: str | None) -> bool:
    """Return True when text parses as a calendar date."""
    return parse_flexible_date(text) is not None
