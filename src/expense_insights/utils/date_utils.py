"""Date parsing for expense records.

Uploaded files come from spreadsheets and bank exports with no agreed date
convention, so a date string is tried against a fixed, ordered list of
formats and the first one whose month and day are in range wins.

A day of 29-31 past the end of its month is clamped to the month's last
day: "2024-02-30" is 29 February 2024 and "31/04/2024" is 30 April 2024.
Months outside 1-12 and days outside 1-31 never match.

IMPORTANT - Date Format Ambiguity:
Slash-separated dates are tried day-first (DD/MM/YYYY) before month-first
(MM/DD/YYYY). "03/04/2024" is therefore 3 April 2024, and the month-first
format only ever matches when the first component is greater than 12
("12/25/2024"). Existing uploads depend on this order; do not reorder.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

# (pattern, format label) in the order they are tried.
# Patterns pin exact digit counts, so unpadded values such as "5/3/2024"
# never match.
DATE_FORMATS = [
    (r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})$", "%Y-%m-%d"),  # YYYY-MM-DD
    (r"^(?P<day>\d{2})/(?P<month>\d{2})/(?P<year>\d{4})$", "%d/%m/%Y"),  # DD/MM/YYYY
    (r"^(?P<month>\d{2})/(?P<day>\d{2})/(?P<year>\d{4})$", "%m/%d/%Y"),  # MM/DD/YYYY
    (r"^(?P<day>\d{2})-(?P<month>\d{2})-(?P<year>\d{4})$", "%d-%m-%Y"),  # DD-MM-YYYY
]

COMPILED_FORMATS = [(re.compile(pattern, re.ASCII), fmt) for pattern, fmt in DATE_FORMATS]


class InvalidDateFormat(ValueError):
    """Raised when a date string matches none of the accepted formats."""

    def __init__(self, text: Optional[str]):
        self.text = text
        super().__init__(f"Cannot parse date: '{text}'")


@dataclass(frozen=True)
class DateParseResult:
    """Outcome of trying a date string against the accepted formats.

    Attributes:
        ok: True if one of the formats matched.
        value: The parsed date when ok, otherwise None.
        reason: Why parsing failed when not ok.
        matched_format: The strptime format that matched.
    """

    ok: bool
    value: Optional[date] = None
    reason: str = ""
    matched_format: Optional[str] = None

    @classmethod
    def success(cls, value: date, fmt: str) -> "DateParseResult":
        return cls(ok=True, value=value, matched_format=fmt)

    @classmethod
    def failure(cls, reason: str) -> "DateParseResult":
        return cls(ok=False, reason=reason)


def _resolve(year: int, month: int, day: int) -> Optional[date]:
    """Build a date, clamping an overflowing day to the end of the month."""
    if year < 1 or not 1 <= month <= 12 or not 1 <= day <= 31:
        return None
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def try_parse_date(text: Optional[str]) -> DateParseResult:
    """Try each accepted format in order without raising.

    Args:
        text: Raw date string.

    Returns:
        DateParseResult describing the first matching format, or a failure.
    """
    if text is None:
        return DateParseResult.failure("Empty date string")

    date_str = text.strip()
    if not date_str:
        return DateParseResult.failure("Empty date string")

    for pattern, fmt in COMPILED_FORMATS:
        match = pattern.match(date_str)
        if not match:
            continue
        parsed = _resolve(int(match["year"]), int(match["month"]), int(match["day"]))
        if parsed is None:
            # Right shape but month or day out of range for this format, try the next
            continue
        return DateParseResult.success(parsed, fmt)

    return DateParseResult.failure(f"No accepted format matches '{date_str}'")


def parse_date(text: Optional[str]) -> date:
    """Parse a date string against the accepted formats.

    Accepted, in order: YYYY-MM-DD, DD/MM/YYYY, MM/DD/YYYY, DD-MM-YYYY.

    Args:
        text: The raw date string.

    Returns:
        Parsed date.

    Raises:
        InvalidDateFormat: If no format matches.
    """
    result = try_parse_date(text)
    if not result.ok or result.value is None:
        raise InvalidDateFormat(text)
    return result.value


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Get the first day of a month and the first day of the next month.

    Args:
        year: Calendar year.
        month: Calendar month (1-12).

    Returns:
        Tuple of (start inclusive, end exclusive).
    """
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end
