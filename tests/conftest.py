"""Shared fixtures for expense insights tests."""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from expense_insights.models.expense import Expense
from expense_insights.service import ExpenseService
from expense_insights.storage.memory import InMemoryExpenseStore
from expense_insights.storage.sql import SqlExpenseStore


def make_expense(
    amount: str,
    vendor_name: str = "Swiggy",
    category: str = "Food",
    expense_date: date = date(2024, 3, 5),
    is_anomaly: bool = False,
    description: Optional[str] = None,
) -> Expense:
    """Create an unsaved expense with sensible defaults."""
    return Expense(
        date=expense_date,
        amount=Decimal(amount),
        vendor_name=vendor_name,
        category=category,
        description=description,
        is_anomaly=is_anomaly,
    )


@pytest.fixture
def memory_store() -> InMemoryExpenseStore:
    return InMemoryExpenseStore()


@pytest.fixture
def sql_store() -> SqlExpenseStore:
    """SQL store on a private in-memory SQLite database."""
    return SqlExpenseStore.from_url("sqlite://")


@pytest.fixture(params=["memory", "sql"])
def store(request: pytest.FixtureRequest, memory_store: InMemoryExpenseStore):
    """Run a test against both storage backends."""
    if request.param == "memory":
        return memory_store
    return SqlExpenseStore.from_url("sqlite://")


@pytest.fixture
def service(store) -> ExpenseService:
    return ExpenseService(store)
