"""Decimal utilities for expense amounts.

All monetary calculations use Decimal to avoid floating-point precision issues.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

# Amounts are stored with two fractional digits
CENTS = Decimal("0.01")


def parse_amount(raw_amount: Optional[str]) -> Decimal:
    """Parse a plain decimal amount string.

    Only plain numbers are accepted ("120", "99.50", "-4.2"); currency
    symbols, thousands separators and locale formats are rejected.

    Args:
        raw_amount: The raw amount string.

    Returns:
        The amount as a Decimal, unrounded.

    Raises:
        ValueError: If the string is empty or not a finite number.
    """
    if raw_amount is None or not raw_amount.strip():
        raise ValueError("Empty amount string")

    amount_str = raw_amount.strip()
    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Cannot parse amount '{raw_amount}'") from e

    if not amount.is_finite():
        raise ValueError(f"Amount must be a finite number, got '{raw_amount}'")

    return amount


def quantize_amount(amount: Decimal) -> Decimal:
    """Round an amount to two decimal places (half up)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: object) -> Optional[Decimal]:
    """Convert a database aggregate result to Decimal.

    SQLite returns floats for aggregates over NUMERIC columns; going through
    str keeps the shortest representation instead of the binary expansion.

    Args:
        value: Value returned by the database (Decimal, int, float or None).

    Returns:
        Decimal value, or None when value is None.
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_currency(amount: Decimal) -> str:
    """Format an amount for display with thousands separators."""
    return f"{quantize_amount(amount):,.2f}"
