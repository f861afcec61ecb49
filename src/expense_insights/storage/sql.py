"""Relational expense store backed by SQLAlchemy.

Usage
-----
store = SqlExpenseStore.from_url("sqlite:///expenses.db")
store.insert(expense)
"""

import datetime as dt
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from expense_insights.models.expense import Expense
from expense_insights.models.report import VendorTotal
from expense_insights.storage.base import ExpenseNotFound, ExpenseStore
from expense_insights.utils.date_utils import month_bounds
from expense_insights.utils.decimal_utils import quantize_amount, to_decimal
from expense_insights.utils.logging_config import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class ExpenseRow(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    vendor_name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String, nullable=False, index=True)
    is_anomaly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime, nullable=False)


def _to_expense(row: ExpenseRow) -> Expense:
    return Expense(
        id=row.id,
        date=row.date,
        amount=quantize_amount(to_decimal(row.amount)),  # type: ignore[arg-type]
        vendor_name=row.vendor_name,
        description=row.description,
        category=row.category,
        is_anomaly=bool(row.is_anomaly),
        created_at=row.created_at,
    )


def _is_memory_sqlite(url: str) -> bool:
    return url.startswith("sqlite") and (":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"))


def create_store_engine(database_url: str) -> Engine:
    """Create an engine for the given URL.

    In-memory SQLite gets a single shared connection; otherwise every new
    connection would see an empty database.
    """
    if _is_memory_sqlite(database_url):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, pool_pre_ping=True)


class SqlExpenseStore(ExpenseStore):
    """ExpenseStore on any SQLAlchemy-supported database.

    Aggregates (sums, averages, top vendors) run as SQL queries. The schema
    is created on construction if missing.
    """

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.engine = engine
        self._session_maker: sessionmaker[Session] = sessionmaker(
            bind=engine, expire_on_commit=False, class_=Session
        )
        if create_schema:
            Base.metadata.create_all(bind=engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlExpenseStore":
        logger.info(f"Opening expense store ({database_url.split(':', 1)[0]})")
        return cls(create_store_engine(database_url))

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""
        session = self._session_maker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def insert(self, expense: Expense) -> Expense:
        created_at = dt.datetime.now()
        with self.session_scope() as session:
            row = ExpenseRow(
                date=expense.date,
                amount=expense.amount,
                vendor_name=expense.vendor_name,
                description=expense.description,
                category=expense.category,
                is_anomaly=expense.is_anomaly,
                created_at=created_at,
            )
            session.add(row)
            session.flush()
            expense.id = row.id
        expense.created_at = created_at
        return expense

    def update(self, expense: Expense) -> Expense:
        with self.session_scope() as session:
            self._apply(session, expense)
        return expense

    def update_many(self, expenses: Iterable[Expense]) -> None:
        with self.session_scope() as session:
            for expense in expenses:
                self._apply(session, expense)

    def _apply(self, session: Session, expense: Expense) -> None:
        row = session.get(ExpenseRow, expense.id) if expense.id is not None else None
        if row is None:
            raise ExpenseNotFound(expense.id)
        row.date = expense.date
        row.amount = expense.amount
        row.vendor_name = expense.vendor_name
        row.description = expense.description
        row.category = expense.category
        row.is_anomaly = expense.is_anomaly

    def delete_by_id(self, expense_id: int) -> None:
        with self.session_scope() as session:
            row = session.get(ExpenseRow, expense_id)
            if row is None:
                raise ExpenseNotFound(expense_id)
            session.delete(row)

    def get(self, expense_id: int) -> Optional[Expense]:
        with self.session_scope() as session:
            row = session.get(ExpenseRow, expense_id)
            return _to_expense(row) if row is not None else None

    def find_all(self) -> list[Expense]:
        with self.session_scope() as session:
            rows = session.scalars(select(ExpenseRow).order_by(ExpenseRow.id))
            return [_to_expense(r) for r in rows]

    def find_anomalies(self) -> list[Expense]:
        with self.session_scope() as session:
            rows = session.scalars(
                select(ExpenseRow)
                .where(ExpenseRow.is_anomaly.is_(True))
                .order_by(ExpenseRow.id)
            )
            return [_to_expense(r) for r in rows]

    def find_by_category(self, category: str) -> list[Expense]:
        with self.session_scope() as session:
            rows = session.scalars(
                select(ExpenseRow)
                .where(ExpenseRow.category == category)
                .order_by(ExpenseRow.id)
            )
            return [_to_expense(r) for r in rows]

    def category_stats(self, category: str) -> tuple[Decimal, int]:
        # Sum and count instead of AVG(): AVG over Numeric(12, 2) comes
        # back rounded to the column scale.
        with self.session_scope() as session:
            total, count = session.execute(
                select(func.sum(ExpenseRow.amount), func.count(ExpenseRow.id))
                .where(ExpenseRow.category == category)
            ).one()
        if not count:
            return Decimal("0"), 0
        return quantize_amount(to_decimal(total)), int(count)  # type: ignore[arg-type]

    def sum_by_category(self, year: int, month: int) -> dict[str, Decimal]:
        start, end = month_bounds(year, month)
        with self.session_scope() as session:
            rows = session.execute(
                select(ExpenseRow.category, func.sum(ExpenseRow.amount))
                .where(ExpenseRow.date >= start, ExpenseRow.date < end)
                .group_by(ExpenseRow.category)
                .order_by(func.min(ExpenseRow.id))
            ).all()
        return {category: quantize_amount(to_decimal(total)) for category, total in rows}  # type: ignore[arg-type]

    def top_vendors_by_spend(self, limit: int) -> list[VendorTotal]:
        total = func.sum(ExpenseRow.amount).label("total")
        with self.session_scope() as session:
            rows = session.execute(
                select(ExpenseRow.vendor_name, total)
                .group_by(ExpenseRow.vendor_name)
                .order_by(total.desc(), ExpenseRow.vendor_name.asc())
                .limit(limit)
            ).all()
        return [
            VendorTotal(vendor, quantize_amount(to_decimal(amount)))  # type: ignore[arg-type]
            for vendor, amount in rows
        ]
