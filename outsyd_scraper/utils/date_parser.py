"""Free-text event date parsing.

The extractor is asked for "Month DD, YYYY" but listing pages leak all sorts
of formats through, so parsing is layered:
1. ISO "2026-03-15"
2. Ranges ("March 15 - 17, 2026", "15 - 17 March 2026") are cut to their
   first day, borrowing the trailing month and year
3. dateutil for everything else ("Sat 14 Mar 2026", "March 15, 2026", "03/15/2026")

A value only counts as a date when the text itself names both month and day.
"""

import re
from datetime import date, datetime

from dateutil import parser as dateutil_parser

# Values the extractor emits when it has no date
PLACEHOLDER_DATES = {"tbd", "tba", "tbc", "n/a", "na", "none", "null", "unknown", "coming soon"}

ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
YEAR_PATTERN = re.compile(r"\b(\d{4})\b")
TIME_ONLY_PATTERN = re.compile(r"^\d{1,2}(?:[:.h]\d{2})?\s*(?:am|pm|h)?$", re.IGNORECASE)
RANGE_SPLIT_PATTERN = re.compile(r"\s*(?:-|–|—|\bto\b|\buntil\b)\s*", re.IGNORECASE)
MONTH_PATTERN = re.compile(
    r"\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b",
    re.IGNORECASE,
)

# Two defaults that differ in month and day; a field the text doesn't name
# comes back different between them
_FIRST_DEFAULT = (1, 1)
_SECOND_DEFAULT = (2, 2)


def _dateutil_parse(value: str, default: datetime) -> date | None:
    try:
        return dateutil_parser.parse(value, default=default, dayfirst=False).date()
    except (ValueError, OverflowError, TypeError):
        return None


def _parse_with_dateutil(value: str, year: int) -> date | None:
    """Parse with dateutil, requiring month and day to come from the text."""
    first = _dateutil_parse(value, datetime(year, *_FIRST_DEFAULT))
    second = _dateutil_parse(value, datetime(year, *_SECOND_DEFAULT))
    if first is None or second is None:
        return None
    if (first.month, first.day) != (second.month, second.day):
        return None
    return first


def _range_start(value: str) -> str | None:
    """First day of a written range, or None if ``value`` is not one.

    Only splits when a month or weekday name is present, so numeric dates
    like "03-15-2026" and time spans like "18:00 - 22:00" pass through whole.
    """
    if not any(ch.isalpha() for ch in value):
        return None
    parts = [p for p in RANGE_SPLIT_PATTERN.split(value) if p]
    if len(parts) != 2:
        return None

    first, rest = parts
    if not MONTH_PATTERN.search(first):
        month_match = MONTH_PATTERN.search(rest)
        if month_match:
            first = f"{first} {month_match.group(1)}"
    year_match = YEAR_PATTERN.search(rest)
    if year_match and not YEAR_PATTERN.search(first):
        first = f"{first} {year_match.group(1)}"
    return first


def parse_event_date(value: str | None, today: date | None = None) -> date | None:
    """Parse a free-text event date into a calendar date.

    Args:
        value: Date string as extracted ("March 15, 2026", "2026-03-15", ...)
        today: Reference day for dates without a year (defaults to today)

    Returns:
        date object or None if the value is a placeholder or unparsable
    """
    if not value or not isinstance(value, str):
        return None

    value = " ".join(value.split())
    if value.lower() in PLACEHOLDER_DATES or not any(ch.isdigit() for ch in value):
        return None
    if TIME_ONLY_PATTERN.match(value):
        return None

    today = today or date.today()

    match = ISO_DATE_PATTERN.match(value)
    if match:
        try:
            return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        except ValueError:
            return None

    parsed = _parse_with_dateutil(_range_start(value) or value, today.year)
    if parsed is None:
        return None

    # No explicit year and already gone this year: it's next year's edition
    if not YEAR_PATTERN.search(value) and parsed < today:
        try:
            parsed = parsed.replace(year=parsed.year + 1)
        except ValueError:
            return None

    return parsed


def parse_future_date(value: str | None, today: date | None = None) -> date | None:
    """Parse an event date, rejecting days strictly before ``today``.

    An event earlier today still counts (date-only comparison).
    """
    today = today or date.today()
    parsed = parse_event_date(value, today=today)
    if parsed is None or parsed < today:
        return None
    return parsed
