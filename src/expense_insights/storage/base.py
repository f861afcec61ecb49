"""Abstract storage backend for expenses."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Optional

from expense_insights.models.expense import Expense
from expense_insights.models.report import VendorTotal


class ExpenseNotFound(LookupError):
    """Raised when an operation targets an expense id that does not exist."""

    def __init__(self, expense_id: object):
        self.expense_id = expense_id
        super().__init__(f"Expense not found: {expense_id}")


class ExpenseStore(ABC):
    """Storage backend consumed by the processing pipeline.

    Subclasses must keep these ordering guarantees:
    - find_all() and find_by_category() return expenses in insertion order
    - sum_by_category() keys appear in order of each category's first insert
    - top_vendors_by_spend() is descending by total, ties by vendor name
    """

    @abstractmethod
    def insert(self, expense: Expense) -> Expense:
        """Persist a new expense.

        Assigns ``id`` and ``created_at`` on the given object and returns it.
        """

    @abstractmethod
    def update(self, expense: Expense) -> Expense:
        """Persist changes to an existing expense.

        Raises:
            ExpenseNotFound: If the expense id is unknown.
        """

    def update_many(self, expenses: Iterable[Expense]) -> None:
        """Persist changes to several existing expenses."""
        for expense in expenses:
            self.update(expense)

    @abstractmethod
    def delete_by_id(self, expense_id: int) -> None:
        """Delete an expense.

        Raises:
            ExpenseNotFound: If the expense id is unknown.
        """

    @abstractmethod
    def get(self, expense_id: int) -> Optional[Expense]:
        """Return one expense, or None if unknown."""

    @abstractmethod
    def find_all(self) -> list[Expense]:
        """Return every expense."""

    @abstractmethod
    def find_anomalies(self) -> list[Expense]:
        """Return every expense whose is_anomaly flag is set."""

    @abstractmethod
    def find_by_category(self, category: str) -> list[Expense]:
        """Return every expense in a category."""

    @abstractmethod
    def category_stats(self, category: str) -> tuple[Decimal, int]:
        """Total amount and number of expenses in a category."""

    def average_amount(self, category: str) -> Optional[Decimal]:
        """Mean amount over a category, or None when it has no expenses.

        The result is rounded to the decimal context precision; use
        category_stats for exact comparisons.
        """
        total, count = self.category_stats(category)
        if not count:
            return None
        return total / count

    @abstractmethod
    def sum_by_category(self, year: int, month: int) -> dict[str, Decimal]:
        """Total amount per category for expenses dated in (year, month)."""

    @abstractmethod
    def top_vendors_by_spend(self, limit: int) -> list[VendorTotal]:
        """Vendors with the highest all-time total spend."""

    @property
    def name(self) -> str:
        return self.__class__.__name__
