"""Tests for AnomalyDetector."""

from decimal import Decimal
from fractions import Fraction

import pytest

from expense_insights.processing.anomaly_detector import AnomalyDetector
from expense_insights.storage.memory import InMemoryExpenseStore

from conftest import make_expense


class TestIsAnomalous:
    """Tests for the threshold rule."""

    @pytest.fixture
    def detector(self, memory_store: InMemoryExpenseStore) -> AnomalyDetector:
        return AnomalyDetector(memory_store)

    def test_exactly_three_times_is_not_anomalous(self, detector: AnomalyDetector) -> None:
        assert detector.is_anomalous(Decimal("300"), Decimal("100")) is False

    def test_above_three_times_is_anomalous(self, detector: AnomalyDetector) -> None:
        assert detector.is_anomalous(Decimal("300.01"), Decimal("100")) is True

    @pytest.mark.parametrize("average", [None, Decimal("0")])
    def test_undefined_average_never_anomalous(self, detector: AnomalyDetector, average) -> None:
        assert detector.is_anomalous(Decimal("1000000"), average) is False
        assert detector.threshold(average) is None

    def test_custom_multiplier(self, memory_store: InMemoryExpenseStore) -> None:
        detector = AnomalyDetector(memory_store, Decimal("2"))
        assert detector.is_anomalous(Decimal("201"), Decimal("100")) is True

    @pytest.mark.parametrize("multiplier", ["0", "-3"])
    def test_multiplier_must_be_positive(self, memory_store: InMemoryExpenseStore, multiplier: str) -> None:
        with pytest.raises(ValueError):
            AnomalyDetector(memory_store, Decimal(multiplier))


class TestEvaluateOnInsert:
    """Tests for single-insert evaluation (average includes the new expense)."""

    def test_first_expense_in_category_is_not_anomalous(self, store) -> None:
        detector = AnomalyDetector(store)
        expense = store.insert(make_expense("5000"))
        assert detector.evaluate_on_insert(expense) is False

    def test_boundary_uses_average_including_new_expense(self, store) -> None:
        """10, 10, 10 then 90: average 30, threshold 90, not strictly above."""
        detector = AnomalyDetector(store)
        for _ in range(3):
            store.insert(make_expense("10"))
        expense = store.insert(make_expense("90"))
        assert detector.evaluate_on_insert(expense) is False

    def test_just_above_boundary(self, store) -> None:
        detector = AnomalyDetector(store)
        for _ in range(3):
            store.insert(make_expense("10"))
        expense = store.insert(make_expense("90.01"))
        assert detector.evaluate_on_insert(expense) is True

    def test_boundary_with_repeating_average(self, store) -> None:
        """Five 0.20 and one 1.00: average 2.00 / 6, so 1.00 is exactly 3x."""
        detector = AnomalyDetector(store)
        for _ in range(5):
            store.insert(make_expense("0.20"))
        expense = store.insert(make_expense("1.00"))

        assert detector.evaluate_on_insert(expense) is False
        assert detector.category_average("Food") == Fraction(1, 3)

    def test_reconcile_with_repeating_average(self, store) -> None:
        detector = AnomalyDetector(store)
        for _ in range(5):
            store.insert(make_expense("0.20"))
        expense = store.insert(make_expense("1.00", is_anomaly=True))

        detector.reevaluate_category("Food")

        assert store.get(expense.id).is_anomaly is False

    def test_other_categories_do_not_count(self, store) -> None:
        detector = AnomalyDetector(store)
        for _ in range(3):
            store.insert(make_expense("1000", vendor_name="Uber", category="Transport"))
        for _ in range(3):
            store.insert(make_expense("100"))
        expense = store.insert(make_expense("1000"))
        assert detector.evaluate_on_insert(expense) is True

    def test_does_not_persist(self, store) -> None:
        detector = AnomalyDetector(store)
        for _ in range(3):
            store.insert(make_expense("100"))
        expense = store.insert(make_expense("1000"))
        assert detector.evaluate_on_insert(expense) is True
        assert store.get(expense.id).is_anomaly is False


class TestReevaluateCategory:
    """Tests for per-category reconciliation."""

    def test_flags_and_clears(self, store) -> None:
        detector = AnomalyDetector(store)
        stale = store.insert(make_expense("20", is_anomaly=True))
        for _ in range(3):
            store.insert(make_expense("20"))
        big = store.insert(make_expense("500"))

        # average 580 / 5 = 116, threshold 348
        changed = detector.reevaluate_category("Food")

        assert changed == 2
        assert store.get(big.id).is_anomaly is True
        assert store.get(stale.id).is_anomaly is False

    def test_leaves_other_categories_alone(self, store) -> None:
        detector = AnomalyDetector(store)
        transport = store.insert(
            make_expense("10", vendor_name="Uber", category="Transport", is_anomaly=True)
        )
        store.insert(make_expense("10"))

        detector.reevaluate_category("Food")

        assert store.get(transport.id).is_anomaly is True

    def test_empty_category_is_noop(self, store) -> None:
        detector = AnomalyDetector(store)
        assert detector.reevaluate_category("Nothing Here") == 0
