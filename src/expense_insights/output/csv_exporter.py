"""CSV export of expense records."""

import csv
from pathlib import Path

from expense_insights.models.expense import Expense
from expense_insights.utils.logging_config import get_logger
from expense_insights.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

# The first four columns match the import layout, so an export can be
# re-imported as is.
EXPORT_HEADERS = ["date", "amount", "vendor_name", "description", "category", "is_anomaly"]


class CSVExporter:
    """Writes expenses to a CSV file."""

    def export_expenses(self, output_path: Path, expenses: list[Expense]) -> Path:
        """Export expenses sorted by date.

        Args:
            output_path: Destination file.
            expenses: Expenses to write.

        Returns:
            Path to the created file.
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(EXPORT_HEADERS)
            for expense in sorted(expenses, key=lambda e: (e.date, e.id or 0)):
                writer.writerow([
                    expense.date.isoformat(),
                    f"{expense.amount:.2f}",
                    sanitize_for_csv(expense.vendor_name),
                    sanitize_for_csv(expense.description) or "",
                    sanitize_for_csv(expense.category),
                    "yes" if expense.is_anomaly else "no",
                ])

        logger.info(f"Exported {len(expenses)} expenses to {output_path}")
        return output_path
