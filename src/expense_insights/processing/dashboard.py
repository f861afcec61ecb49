"""Dashboard aggregation over stored expenses."""

from expense_insights.models.report import DashboardSummary
from expense_insights.processing.record_builder import ValidationError
from expense_insights.storage.base import ExpenseStore
from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TOP_VENDORS = 5


class DashboardAggregator:
    """Builds the monthly dashboard summary.

    Only the category totals are restricted to the requested month; the
    top vendors and the anomaly set are all-time.
    """

    def __init__(self, store: ExpenseStore, top_vendor_limit: int = DEFAULT_TOP_VENDORS):
        """Initialize dashboard aggregator.

        Args:
            store: Storage backend providing grouped sums.
            top_vendor_limit: Maximum number of vendors to report.
        """
        if top_vendor_limit < 1:
            raise ValueError(f"top_vendor_limit must be at least 1, got {top_vendor_limit}")
        self.store = store
        self.top_vendor_limit = top_vendor_limit

    def get_dashboard(self, year: int, month: int) -> DashboardSummary:
        """Compute the dashboard for a month.

        Args:
            year: Calendar year.
            month: Calendar month (1-12).

        Returns:
            DashboardSummary for the month.

        Raises:
            ValidationError: If month is outside 1-12 or year is not positive.
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {month}", field="month")
        if year < 1:
            raise ValidationError(f"Year must be positive, got {year}", field="year")

        summary = DashboardSummary(
            year=year,
            month=month,
            monthly_category_totals=self.store.sum_by_category(year, month),
            top_vendors=self.store.top_vendors_by_spend(self.top_vendor_limit),
            anomalies=self.store.find_anomalies(),
        )

        logger.debug(
            f"Dashboard {summary.period_display}: "
            f"{len(summary.monthly_category_totals)} categories, "
            f"{len(summary.top_vendors)} vendors, {summary.anomaly_count} anomalies"
        )
        return summary
