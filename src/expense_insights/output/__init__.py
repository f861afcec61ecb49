"""Output generation for CSV and Excel exports."""

from expense_insights.output.csv_exporter import CSVExporter
from expense_insights.output.excel_writer import ExcelWriter

__all__ = ["CSVExporter", "ExcelWriter"]
