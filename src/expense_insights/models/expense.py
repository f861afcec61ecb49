"""Expense data models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional


@dataclass
class ExpenseInput:
    """Manual-entry request for a new expense.

    Nothing is validated here; RecordBuilder owns validation so that the
    manual and file-import paths apply the same rules.

    Attributes:
        date: Day the expense occurred.
        amount: Positive amount.
        vendor_name: Raw merchant/vendor string.
        description: Optional free text.
        category: Optional manual category override.
    """

    date: Optional[date]
    amount: Optional[Decimal]
    vendor_name: Optional[str]
    description: Optional[str] = None
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExpenseInput":
        """Create from a plain mapping (e.g. decoded JSON).

        Strings are accepted for date (ISO format) and amount.
        """
        raw_date = data.get("date")
        if isinstance(raw_date, str):
            raw_date = date.fromisoformat(raw_date.strip())

        raw_amount = data.get("amount")
        if raw_amount is not None and not isinstance(raw_amount, Decimal):
            raw_amount = Decimal(str(raw_amount))

        return cls(
            date=raw_date,
            amount=raw_amount,
            vendor_name=data.get("vendor_name"),
            description=data.get("description"),
            category=data.get("category"),
        )


@dataclass
class Expense:
    """A single expense record.

    Attributes:
        date: Day the expense occurred (no time component).
        amount: Positive amount with two fractional digits.
        vendor_name: Raw merchant/vendor string, never empty.
        category: Assigned category, never empty ("Other" when unmatched).
        description: Optional free text.
        id: Identifier assigned by the store on insert.
        is_anomaly: Cached anomaly flag as of the last evaluation. Single
            inserts evaluate only the new expense; bulk imports reconcile
            every expense in the touched categories. Changes made by other
            flows in between are not reflected until the next evaluation.
        created_at: Set once by the store on insert.
    """

    date: date
    amount: Decimal
    vendor_name: str
    category: str
    description: Optional[str] = None
    id: Optional[int] = None
    is_anomaly: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def to_dict(self) -> dict[str, object]:
        """Serialize to JSON-friendly primitives."""
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "amount": f"{self.amount:.2f}",
            "vendor_name": self.vendor_name,
            "description": self.description,
            "category": self.category,
            "is_anomaly": self.is_anomaly,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"Expense(id={self.id}, date={self.date}, "
            f"vendor={self.vendor_name[:30]!r}, amount={self.amount}, "
            f"category={self.category!r}, anomaly={self.is_anomaly})"
        )
