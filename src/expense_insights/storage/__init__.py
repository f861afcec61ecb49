"""Storage backends for expense records."""

from expense_insights.storage.base import ExpenseNotFound, ExpenseStore
from expense_insights.storage.memory import InMemoryExpenseStore
from expense_insights.storage.sql import SqlExpenseStore

__all__ = [
    "ExpenseStore",
    "ExpenseNotFound",
    "InMemoryExpenseStore",
    "SqlExpenseStore",
]
