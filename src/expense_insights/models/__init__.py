"""Data models for expenses, categorization rules and dashboard reports."""

from expense_insights.models.category import (
    DEFAULT_RULES,
    OTHER_CATEGORY,
    CategoryRule,
    RuleTable,
)
from expense_insights.models.expense import Expense, ExpenseInput
from expense_insights.models.report import DashboardSummary, VendorTotal

__all__ = [
    "Expense",
    "ExpenseInput",
    "CategoryRule",
    "RuleTable",
    "DEFAULT_RULES",
    "OTHER_CATEGORY",
    "DashboardSummary",
    "VendorTotal",
]
