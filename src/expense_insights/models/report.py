"""Dashboard report models."""

from dataclasses import dataclass, field
from decimal import Decimal

from expense_insights.models.expense import Expense


@dataclass(frozen=True)
class VendorTotal:
    """All-time spend for one vendor."""

    vendor_name: str
    total: Decimal

    def to_dict(self) -> dict[str, object]:
        return {"vendor_name": self.vendor_name, "total": f"{self.total:.2f}"}


@dataclass
class DashboardSummary:
    """Pre-computed dashboard data for one month.

    Attributes:
        year: Calendar year of the category totals.
        month: Calendar month (1-12) of the category totals.
        monthly_category_totals: Spend per category within the month,
            in the store's grouping order.
        top_vendors: Highest-spend vendors of all time, descending.
        anomalies: Every expense currently flagged as an anomaly (not
            restricted to the month).
    """

    year: int
    month: int
    monthly_category_totals: dict[str, Decimal] = field(default_factory=dict)
    top_vendors: list[VendorTotal] = field(default_factory=list)
    anomalies: list[Expense] = field(default_factory=list)

    @property
    def anomaly_count(self) -> int:
        return len(self.anomalies)

    @property
    def monthly_total(self) -> Decimal:
        """Total spend across all categories for the month."""
        return sum(self.monthly_category_totals.values(), Decimal("0"))

    @property
    def period_display(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def to_dict(self) -> dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "monthly_category_totals": {
                category: f"{total:.2f}"
                for category, total in self.monthly_category_totals.items()
            },
            "top_vendors": [v.to_dict() for v in self.top_vendors],
            "anomalies": [e.to_dict() for e in self.anomalies],
            "anomaly_count": self.anomaly_count,
        }
