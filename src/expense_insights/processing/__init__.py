"""Expense ingestion and classification pipeline components."""

from expense_insights.processing.categorizer import Categorizer, categorize
from expense_insights.processing.record_builder import (
    MalformedRow,
    RecordBuilder,
    ValidationError,
)
from expense_insights.processing.anomaly_detector import AnomalyDetector
from expense_insights.processing.importer import (
    BulkImporter,
    ImportFileError,
    ImportResult,
    SkippedRow,
)
from expense_insights.processing.dashboard import DashboardAggregator

__all__ = [
    "Categorizer",
    "categorize",
    "RecordBuilder",
    "ValidationError",
    "MalformedRow",
    "AnomalyDetector",
    "BulkImporter",
    "ImportFileError",
    "ImportResult",
    "SkippedRow",
    "DashboardAggregator",
]
