"""Excel workbook writer for the dashboard summary."""

from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from expense_insights.models.report import DashboardSummary
from expense_insights.utils.logging_config import get_logger
from expense_insights.utils.sanitize import sanitize_for_csv

logger = get_logger(__name__)

MONEY_FORMAT = "#,##0.00"


class ExcelWriter:
    """Writes a dashboard summary to a workbook.

    Generates sheets:
    - Category Totals (for the dashboard month)
    - Top Vendors (all-time)
    - Anomalies
    """

    SHEET_CATEGORY_TOTALS = "Category Totals"
    SHEET_TOP_VENDORS = "Top Vendors"
    SHEET_ANOMALIES = "Anomalies"

    def __init__(self) -> None:
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(
            start_color="4472C4", end_color="4472C4", fill_type="solid"
        )
        self.anomaly_font = Font(color="CC0000")  # Dark red

    def write_dashboard(self, output_path: Path, summary: DashboardSummary) -> Path:
        """Write the dashboard workbook.

        Args:
            output_path: Destination .xlsx file.
            summary: Dashboard summary to write.

        Returns:
            Path to the saved workbook.
        """
        logger.info(f"Writing dashboard workbook to {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_category_totals(wb, summary)
        self._create_top_vendors(wb, summary)
        self._create_anomalies(wb, summary)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        return output_path

    def _write_header(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            ws.column_dimensions[get_column_letter(col)].width = max(14, len(header) + 4)
        ws.freeze_panes = "A2"

    def _create_category_totals(self, wb: Workbook, summary: DashboardSummary) -> None:
        ws = wb.create_sheet(self.SHEET_CATEGORY_TOTALS)
        self._write_header(ws, [f"Category ({summary.period_display})", "Total"])

        row = 2
        for category, total in summary.monthly_category_totals.items():
            ws.cell(row=row, column=1, value=sanitize_for_csv(category))
            ws.cell(row=row, column=2, value=float(total)).number_format = MONEY_FORMAT
            row += 1

        ws.cell(row=row, column=1, value="Total").font = Font(bold=True)
        total_cell = ws.cell(row=row, column=2, value=float(summary.monthly_total))
        total_cell.font = Font(bold=True)
        total_cell.number_format = MONEY_FORMAT

    def _create_top_vendors(self, wb: Workbook, summary: DashboardSummary) -> None:
        ws = wb.create_sheet(self.SHEET_TOP_VENDORS)
        self._write_header(ws, ["Rank", "Vendor", "Total Spend"])
        ws.column_dimensions["B"].width = 32

        for rank, vendor in enumerate(summary.top_vendors, 1):
            ws.cell(row=rank + 1, column=1, value=rank)
            ws.cell(row=rank + 1, column=2, value=sanitize_for_csv(vendor.vendor_name))
            ws.cell(row=rank + 1, column=3, value=float(vendor.total)).number_format = MONEY_FORMAT

    def _create_anomalies(self, wb: Workbook, summary: DashboardSummary) -> None:
        ws = wb.create_sheet(self.SHEET_ANOMALIES)
        self._write_header(ws, ["ID", "Date", "Vendor", "Category", "Amount", "Description"])
        ws.column_dimensions["C"].width = 32
        ws.column_dimensions["F"].width = 40

        for row, expense in enumerate(sorted(summary.anomalies, key=lambda e: e.date), 2):
            ws.cell(row=row, column=1, value=expense.id)
            ws.cell(row=row, column=2, value=expense.date).number_format = "yyyy-mm-dd"
            ws.cell(row=row, column=3, value=sanitize_for_csv(expense.vendor_name))
            ws.cell(row=row, column=4, value=sanitize_for_csv(expense.category))
            amount_cell = ws.cell(row=row, column=5, value=float(expense.amount))
            amount_cell.number_format = MONEY_FORMAT
            amount_cell.font = self.anomaly_font
            ws.cell(row=row, column=6, value=sanitize_for_csv(expense.description))
