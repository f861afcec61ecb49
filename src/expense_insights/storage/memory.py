"""In-process expense store."""

import copy
import itertools
from datetime import datetime
from decimal import Decimal
from typing import Optional

from expense_insights.models.expense import Expense
from expense_insights.models.report import VendorTotal
from expense_insights.storage.base import ExpenseNotFound, ExpenseStore


class InMemoryExpenseStore(ExpenseStore):
    """Dict-backed store used for tests and dry runs.

    Stored records are copies, so callers only see changes they persist
    through ``update``/``update_many``, same as with a database.
    """

    def __init__(self) -> None:
        self._rows: dict[int, Expense] = {}
        self._ids = itertools.count(1)

    def insert(self, expense: Expense) -> Expense:
        expense.id = next(self._ids)
        expense.created_at = datetime.now()
        self._rows[expense.id] = copy.copy(expense)
        return expense

    def update(self, expense: Expense) -> Expense:
        if expense.id is None or expense.id not in self._rows:
            raise ExpenseNotFound(expense.id)
        stored = copy.copy(expense)
        # created_at is immutable once assigned
        stored.created_at = self._rows[expense.id].created_at
        self._rows[expense.id] = stored
        return expense

    def delete_by_id(self, expense_id: int) -> None:
        if expense_id not in self._rows:
            raise ExpenseNotFound(expense_id)
        del self._rows[expense_id]

    def get(self, expense_id: int) -> Optional[Expense]:
        row = self._rows.get(expense_id)
        return copy.copy(row) if row is not None else None

    def find_all(self) -> list[Expense]:
        return [copy.copy(e) for e in self._rows.values()]

    def find_anomalies(self) -> list[Expense]:
        return [copy.copy(e) for e in self._rows.values() if e.is_anomaly]

    def find_by_category(self, category: str) -> list[Expense]:
        return [copy.copy(e) for e in self._rows.values() if e.category == category]

    def category_stats(self, category: str) -> tuple[Decimal, int]:
        amounts = [e.amount for e in self._rows.values() if e.category == category]
        return sum(amounts, Decimal("0")), len(amounts)

    def sum_by_category(self, year: int, month: int) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = {}
        for e in self._rows.values():
            if e.date.year == year and e.date.month == month:
                totals[e.category] = totals.get(e.category, Decimal("0")) + e.amount
        return totals

    def top_vendors_by_spend(self, limit: int) -> list[VendorTotal]:
        totals: dict[str, Decimal] = {}
        for e in self._rows.values():
            totals[e.vendor_name] = totals.get(e.vendor_name, Decimal("0")) + e.amount
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return [VendorTotal(vendor, total) for vendor, total in ranked[:limit]]

    def __len__(self) -> int:
        return len(self._rows)
