"""Expense service: the operations exposed to outer surfaces (CLI, HTTP)."""

from decimal import Decimal
from typing import TYPE_CHECKING, Mapping, Optional

from expense_insights.models.expense import Expense, ExpenseInput
from expense_insights.models.report import DashboardSummary
from expense_insights.processing.anomaly_detector import DEFAULT_MULTIPLIER, AnomalyDetector
from expense_insights.processing.categorizer import Categorizer
from expense_insights.processing.dashboard import DEFAULT_TOP_VENDORS, DashboardAggregator
from expense_insights.processing.importer import BulkImporter, ImportResult, ImportSource
from expense_insights.processing.record_builder import RecordBuilder
from expense_insights.storage.base import ExpenseStore
from expense_insights.utils.logging_config import get_logger

if TYPE_CHECKING:
    from expense_insights.config import Config

logger = get_logger(__name__)


class ExpenseService:
    """Wires the pipeline components around one storage backend."""

    def __init__(
        self,
        store: ExpenseStore,
        categorizer: Optional[Categorizer] = None,
        multiplier: Decimal = DEFAULT_MULTIPLIER,
        top_vendor_limit: int = DEFAULT_TOP_VENDORS,
    ):
        """Initialize the service.

        Args:
            store: Storage backend.
            categorizer: Categorizer (defaults to the built-in rules).
            multiplier: Anomaly threshold multiple of the category average.
            top_vendor_limit: Number of vendors reported on the dashboard.
        """
        self.store = store
        self.categorizer = categorizer if categorizer is not None else Categorizer()
        self.record_builder = RecordBuilder(self.categorizer)
        self.anomaly_detector = AnomalyDetector(store, multiplier)
        self.importer = BulkImporter(store, self.record_builder, self.anomaly_detector)
        self.dashboard = DashboardAggregator(store, top_vendor_limit)

    @classmethod
    def from_config(cls, config: "Config") -> "ExpenseService":
        """Build a service backed by the configured SQL database."""
        from expense_insights.storage.sql import SqlExpenseStore

        return cls(
            store=SqlExpenseStore.from_url(config.storage.database_url),
            categorizer=Categorizer(config.rule_table),
            multiplier=config.anomaly.multiplier,
            top_vendor_limit=config.dashboard.top_vendors,
        )

    def add_expense(self, expense_input: ExpenseInput) -> Expense:
        """Validate, categorize, store and evaluate a manually entered expense.

        Raises:
            ValidationError: If the input is invalid. Nothing is stored.
        """
        expense = self.record_builder.build(expense_input)
        expense = self.store.insert(expense)

        # Evaluated after insert so the new amount counts toward the average
        expense.is_anomaly = self.anomaly_detector.evaluate_on_insert(expense)
        if expense.is_anomaly:
            self.store.update(expense)

        logger.info(f"Added expense {expense.id}: {expense.vendor_name} -> {expense.category}")
        return expense

    def list_expenses(self) -> list[Expense]:
        return self.store.find_all()

    def delete_expense(self, expense_id: int) -> None:
        """Delete an expense.

        Raises:
            ExpenseNotFound: If no expense has this id.
        """
        self.store.delete_by_id(expense_id)
        logger.info(f"Deleted expense {expense_id}")

    def import_file(self, source: ImportSource) -> ImportResult:
        """Bulk-import a CSV file (see BulkImporter.import_file)."""
        return self.importer.import_file(source)

    def list_anomalies(self) -> list[Expense]:
        return self.store.find_anomalies()

    def get_dashboard(self, year: int, month: int) -> DashboardSummary:
        return self.dashboard.get_dashboard(year, month)

    def list_mappings(self) -> Mapping[str, str]:
        return self.categorizer.list_mappings()
