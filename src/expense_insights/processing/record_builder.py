"""Builds validated, categorized expense records from manual input or CSV rows."""

from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from expense_insights.models.expense import Expense, ExpenseInput
from expense_insights.processing.categorizer import Categorizer
from expense_insights.utils.date_utils import parse_date
from expense_insights.utils.decimal_utils import parse_amount, quantize_amount
from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)

# Column positions in an uploaded file
DATE_COL = 0
AMOUNT_COL = 1
VENDOR_COL = 2
DESCRIPTION_COL = 3
MIN_ROW_COLUMNS = 3

# Largest amount the expenses table holds (Numeric(12, 2))
MAX_AMOUNT = Decimal("9999999999.99")


class ValidationError(ValueError):
    """Raised when an expense fails validation (bad amount, empty vendor, ...)."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class MalformedRow(ValueError):
    """Raised when an uploaded row has the wrong shape or a non-numeric amount."""

    def __init__(self, message: str, row: Optional[Sequence[str]] = None):
        self.row = list(row) if row is not None else None
        super().__init__(message)


class RecordBuilder:
    """Constructs unsaved Expense records.

    The builder leaves ``id``, ``created_at`` and ``is_anomaly`` alone; the
    store and the anomaly detector own those.
    """

    def __init__(self, categorizer: Optional[Categorizer] = None):
        """Initialize record builder.

        Args:
            categorizer: Categorizer used when no category is supplied.
        """
        self.categorizer = categorizer if categorizer is not None else Categorizer()

    def build(self, expense_input: ExpenseInput) -> Expense:
        """Build an expense from structured input.

        Args:
            expense_input: Manual-entry request.

        Returns:
            Unsaved Expense.

        Raises:
            ValidationError: If date is missing, amount is not positive or
                too large for storage, or vendor name is empty.
        """
        if expense_input.date is None:
            raise ValidationError("Date is required", field="date")

        amount = self._validate_amount(expense_input.amount)

        vendor_name = (expense_input.vendor_name or "").strip()
        if not vendor_name:
            raise ValidationError("Vendor name must not be empty", field="vendor_name")

        override = (expense_input.category or "").strip()
        if override:
            category = override
        else:
            category = self.categorizer.categorize(vendor_name)

        description = expense_input.description
        if description is not None:
            description = description.strip() or None

        logger.debug(f"Built expense for {vendor_name!r} in {category}")
        return Expense(
            date=expense_input.date,
            amount=amount,
            vendor_name=vendor_name,
            description=description,
            category=category,
        )

    def build_from_row(self, row: Sequence[str]) -> Expense:
        """Build an expense from one uploaded CSV row.

        Columns: date, amount, vendor name, optional description. Extra
        columns are ignored. Imported rows are always categorized by rules.

        Args:
            row: Raw row cells.

        Returns:
            Unsaved Expense.

        Raises:
            MalformedRow: If the row has fewer than three columns or the
                amount is not numeric.
            InvalidDateFormat: If the date matches no accepted format.
            ValidationError: If the amount or vendor fails validation.
        """
        if len(row) < MIN_ROW_COLUMNS:
            raise MalformedRow(
                f"Expected at least {MIN_ROW_COLUMNS} columns, got {len(row)}", row
            )

        expense_date = parse_date(row[DATE_COL])

        try:
            amount = parse_amount(row[AMOUNT_COL])
        except ValueError as e:
            raise MalformedRow(str(e), row) from e

        description = row[DESCRIPTION_COL] if len(row) > DESCRIPTION_COL else None

        return self.build(
            ExpenseInput(
                date=expense_date,
                amount=amount,
                vendor_name=row[VENDOR_COL],
                description=description,
            )
        )

    def _validate_amount(self, amount: Optional[Decimal]) -> Decimal:
        if amount is None:
            raise ValidationError("Amount is required", field="amount")
        if not isinstance(amount, Decimal):
            try:
                amount = Decimal(str(amount))
            except InvalidOperation as e:
                raise ValidationError(f"Amount is not a number: {amount!r}", field="amount") from e
        if not amount.is_finite():
            raise ValidationError(f"Amount must be a finite number, got {amount}", field="amount")

        # Positivity is checked after rounding so a stored amount is never 0.00
        try:
            rounded = quantize_amount(amount)
        except InvalidOperation as e:
            raise ValidationError(f"Amount is too large: {amount}", field="amount") from e
        if rounded <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}", field="amount")
        if rounded > MAX_AMOUNT:
            raise ValidationError(
                f"Amount must not exceed {MAX_AMOUNT}, got {amount}", field="amount"
            )
        return rounded
