"""Sanitization utilities for safe CSV output."""

from typing import Optional


# Characters that trigger formula execution in spreadsheet applications
# when they appear at the start of a cell value
_FORMULA_CHARS = ("=", "+", "-", "@", "\t", "\r", "\n", "|")


def sanitize_for_csv(value: Optional[str]) -> Optional[str]:
    """Prefix formula-triggering values with a single quote.

    Vendor names and descriptions come straight from user uploads, so a
    value like ``=HYPERLINK(...)`` must not be evaluated when the export is
    opened in a spreadsheet.

    Args:
        value: String value to sanitize, or None.

    Returns:
        Sanitized string, or None if input was None.
    """
    if not value:
        return value

    if value.startswith(_FORMULA_CHARS):
        return "'" + value

    return value
