"""Per-category anomaly detection for expenses.

An expense is anomalous when its amount is strictly greater than the
category's average amount times a multiplier (3 by default). The flag is
cached on the expense:

- a single insert evaluates only the new expense, against an average that
  already includes it
- a bulk import reconciles every expense in each touched category once all
  rows are in, since a large batch can move the average enough to change
  earlier verdicts

Between evaluations the stored flags can be stale. Concurrent
reconciliations of the same category are last-write-wins.
"""

from decimal import Decimal
from fractions import Fraction
from typing import Optional, Union

from expense_insights.models.expense import Expense
from expense_insights.storage.base import ExpenseStore
from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MULTIPLIER = Decimal("3")

# Averages are kept as exact fractions; a Decimal mean of a repeating
# value such as 2.00 / 6 would put 3x the average just under the amount.
Average = Union[Decimal, Fraction]


class AnomalyDetector:
    """Flags expenses whose amount exceeds a multiple of the category average."""

    def __init__(self, store: ExpenseStore, multiplier: Decimal = DEFAULT_MULTIPLIER):
        """Initialize anomaly detector.

        Args:
            store: Storage backend providing category averages.
            multiplier: Threshold multiple of the category average.
        """
        if multiplier <= 0:
            raise ValueError(f"Anomaly multiplier must be positive, got {multiplier}")
        self.store = store
        self.multiplier = multiplier

    def threshold(self, average: Optional[Average]) -> Optional[Fraction]:
        """Threshold for an average, or None when the average is undefined or zero."""
        if average is None or average == 0:
            return None
        return Fraction(average) * Fraction(self.multiplier)

    def category_average(self, category: str) -> Optional[Fraction]:
        """Exact mean amount of a category, or None when it has no expenses."""
        total, count = self.store.category_stats(category)
        if not count:
            return None
        return Fraction(total) / count

    def is_anomalous(self, amount: Decimal, average: Optional[Average]) -> bool:
        """Check an amount against a category average.

        Args:
            amount: Expense amount.
            average: Category average amount, None if the category is empty.

        Returns:
            True if amount is strictly greater than average * multiplier.
        """
        threshold = self.threshold(average)
        if threshold is None:
            return False
        return Fraction(amount) > threshold

    def evaluate_on_insert(self, expense: Expense) -> bool:
        """Evaluate a freshly persisted expense.

        The expense must already be stored so it counts toward its
        category's average. Does not modify or persist the expense.

        Args:
            expense: Persisted expense.

        Returns:
            Whether the expense is an anomaly.
        """
        average = self.category_average(expense.category)
        result = self.is_anomalous(expense.amount, average)
        if result:
            logger.info(
                f"Expense {expense.id} ({expense.vendor_name}, {expense.amount}) "
                f"exceeds {self.multiplier}x {expense.category} average {float(average):.2f}"
            )
        return result

    def reevaluate_category(self, category: str) -> int:
        """Recompute and persist the anomaly flag of every expense in a category.

        Leaves flags untouched when the category has no expenses.

        Args:
            category: Category to reconcile.

        Returns:
            Number of expenses whose flag changed.
        """
        average = self.category_average(category)
        if average is None:
            logger.debug(f"No expenses in {category}, skipping reconciliation")
            return 0

        expenses = self.store.find_by_category(category)
        changed = 0
        for expense in expenses:
            flag = self.is_anomalous(expense.amount, average)
            if flag != expense.is_anomaly:
                changed += 1
            expense.is_anomaly = flag

        self.store.update_many(expenses)

        flagged = sum(1 for e in expenses if e.is_anomaly)
        logger.info(
            f"Reconciled {len(expenses)} expenses in {category}: "
            f"{flagged} anomalies, {changed} flags changed"
        )
        return changed
