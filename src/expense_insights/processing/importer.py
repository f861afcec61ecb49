"""Bulk CSV import of expenses.

Rows are processed one at a time. A bad row is skipped and recorded, never
fatal; only a failure to read the file itself aborts the import. Once all
rows are in, anomaly flags are reconciled once per category touched by the
saved rows.
"""

import csv
import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Iterable, Sequence, Union

from expense_insights.models.expense import Expense
from expense_insights.processing.anomaly_detector import AnomalyDetector
from expense_insights.processing.record_builder import MalformedRow, RecordBuilder
from expense_insights.storage.base import ExpenseStore
from expense_insights.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

ImportSource = Union[str, Path, IO[str], IO[bytes]]


class ImportFileError(Exception):
    """Raised when the import file cannot be opened or read."""

    def __init__(self, message: str, source: object = None, saved_count: int = 0):
        """Initialize ImportFileError.

        Args:
            message: Error message.
            source: The path or stream that failed.
            saved_count: Rows already saved before the read failure.
        """
        self.source = source
        self.saved_count = saved_count
        super().__init__(message)


@dataclass(frozen=True)
class SkippedRow:
    """A row that could not be imported.

    Attributes:
        line_number: 1-based row position in the file (the header is row 1).
        row: Raw cells as read.
        reason: Error message explaining the skip.
    """

    line_number: int
    row: tuple[str, ...]
    reason: str


@dataclass
class ImportResult:
    """Outcome of a bulk import."""

    saved: list[Expense] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def saved_count(self) -> int:
        return len(self.saved)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def categories(self) -> list[str]:
        """Distinct categories of saved expenses, in first-seen order."""
        return list(dict.fromkeys(e.category for e in self.saved))


class BulkImporter:
    """Imports expenses from delimited rows.

    Expected columns: date, amount, vendor_name, description (optional).
    The first row is a header and is discarded without inspection.
    """

    def __init__(
        self,
        store: ExpenseStore,
        record_builder: RecordBuilder,
        anomaly_detector: AnomalyDetector,
    ):
        self.store = store
        self.record_builder = record_builder
        self.anomaly_detector = anomaly_detector

    def import_file(self, source: ImportSource) -> ImportResult:
        """Import a comma-delimited UTF-8 file.

        Args:
            source: Path, text stream, or binary stream.

        Returns:
            ImportResult with saved expenses and skipped rows.

        Raises:
            ImportFileError: If the file cannot be opened or read.
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            try:
                with open(path, encoding="utf-8-sig", newline="") as f:
                    return self._import_stream(f, path.name)
            except OSError as e:
                raise ImportFileError(f"Cannot read {path}: {e}", path) from e

        label = getattr(source, "name", "<stream>")
        if isinstance(source, io.TextIOBase):
            return self._import_stream(source, label)  # type: ignore[arg-type]

        wrapper = io.TextIOWrapper(source, encoding="utf-8-sig", newline="")  # type: ignore[arg-type]
        try:
            return self._import_stream(wrapper, label)
        finally:
            # Leave the caller's binary stream open
            wrapper.detach()

    def _import_stream(self, stream: IO[str], label: object) -> ImportResult:
        reader = csv.reader(stream)
        with LogContext(logger, "import", source=label):
            result = self.import_rows(reader, source=label)
        logger.info(
            f"Imported {result.saved_count} expenses from {label} "
            f"({result.skipped_count} rows skipped)"
        )
        return result

    def import_rows(
        self,
        rows: Iterable[Sequence[str]],
        source: object = "<rows>",
    ) -> ImportResult:
        """Import already-split rows; the first row is the header.

        Args:
            rows: Row iterable, header first.
            source: Label used in log and error messages.

        Returns:
            ImportResult with saved expenses and skipped rows.

        Raises:
            ImportFileError: If iterating the rows fails (unreadable stream).
        """
        result = ImportResult()
        iterator = iter(rows)

        try:
            header = next(iterator, None)
            if header is None:
                logger.warning(f"{source}: empty file, nothing to import")
                return result

            for line_number, row in enumerate(iterator, start=2):
                self._import_row(line_number, row, result)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            # Keep flags consistent for whatever made it in before the failure
            self._reconcile(result)
            raise ImportFileError(
                f"Failed to read {source}: {e}", source, saved_count=result.saved_count
            ) from e

        self._reconcile(result)

        if result.skipped:
            logger.warning(
                f"{result.skipped_count} rows could not be imported from {source} - use -v for details"
            )
        return result

    def _import_row(self, line_number: int, row: Sequence[str], result: ImportResult) -> None:
        raw = _raw_cells(row)
        try:
            cells = _normalize_cells(row)
            if not any(cells):
                raise ValueError("Empty row")
            expense = self.record_builder.build_from_row(cells)
            result.saved.append(self.store.insert(expense))
        except Exception as e:
            logger.warning(f"Skipping row {line_number}: {e}")
            result.skipped.append(SkippedRow(line_number, raw, str(e)))

    def _reconcile(self, result: ImportResult) -> None:
        categories = result.categories
        for category in categories:
            self.anomaly_detector.reevaluate_category(category)

        # Saved expenses carry the flags as of this reconciliation
        flags: dict[int, bool] = {}
        for category in categories:
            for stored in self.store.find_by_category(category):
                if stored.id is not None:
                    flags[stored.id] = stored.is_anomaly
        for expense in result.saved:
            if expense.id in flags:
                expense.is_anomaly = flags[expense.id]


def _raw_cells(row: object) -> tuple[str, ...]:
    if isinstance(row, (list, tuple)):
        return tuple(str(cell) for cell in row)
    return (str(row),)


def _normalize_cells(row: Sequence[str]) -> tuple[str, ...]:
    """Strip every cell; rows must be sequences of text cells."""
    if not isinstance(row, (list, tuple)):
        raise MalformedRow(f"Expected a sequence of cells, got {type(row).__name__}")
    for position, cell in enumerate(row):
        if not isinstance(cell, str):
            raise MalformedRow(
                f"Column {position + 1} is {type(cell).__name__}, expected text", row
            )
    return tuple(cell.strip() for cell in row)
