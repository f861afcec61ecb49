"""Expense ingestion, rule-based categorization and anomaly tracking."""

__version__ = "0.1.0"
