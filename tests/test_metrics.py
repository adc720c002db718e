"""Tests for completion, lateness and dashboard aggregates."""

from datetime import timedelta
from decimal import Decimal

import pytest

from conftest import NOW, at
from production_scheduler.core.clock import FixedClock
from production_scheduler.domain import LatenessClass
from production_scheduler.services.metrics import (
    MetricsCalculator,
    completion_percentage,
    order_completion,
)


class TestCompletionPercentage:
    """Test completion rounding and the zero-ordered guard."""

    @pytest.mark.parametrize(
        "ordered, produced, expected",
        [
            (100, 50, "50.00"),
            (3, 1, "33.33"),
            (3, 2, "66.67"),
            (8, 1, "12.50"),
            (0, 10, "0.00"),
            (10, 25, "250.00"),
        ],
    )
    def test_values(self, ordered, produced, expected):
        assert completion_percentage(ordered, produced) == Decimal(expected)

    def test_half_even_rounding(self):
        """Ties round to the even cent."""
        # 1/800 * 100 = 0.125 -> 0.12, 3/800 * 100 = 0.375 -> 0.38
        assert completion_percentage(Decimal("800"), Decimal("1")) == Decimal("0.12")
        assert completion_percentage(Decimal("800"), Decimal("3")) == Decimal("0.38")

    def test_never_negative(self, order_factory):
        order = order_factory.create(ordered_quantity=Decimal("0"))
        assert order_completion(order) >= 0


class TestLateness:
    """Test lateness classes relative to the clock's date (2025-03-10)."""

    @pytest.fixture
    def metrics(self):
        return MetricsCalculator(clock=FixedClock(NOW))

    def test_no_deadline(self, metrics, order_factory):
        order = order_factory.create(expected_end=None)
        assert metrics.classify_lateness(order) is LatenessClass.NO_DEADLINE

    def test_overdue(self, metrics, order_factory):
        order = order_factory.create(expected_end=at(9, 23))
        assert metrics.classify_lateness(order) is LatenessClass.OVERDUE

    def test_closed_past_deadline_is_completed(self, metrics, order_factory):
        order = order_factory.create(state_code="CH", expected_end=at(9, 23), actual_end=at(9, 20))
        assert metrics.classify_lateness(order) is LatenessClass.COMPLETED

    def test_due_today(self, metrics, order_factory):
        order = order_factory.create(expected_end=at(10, 23, 59))
        assert metrics.classify_lateness(order) is LatenessClass.DUE_TODAY

    def test_upcoming_within_seven_days(self, metrics, order_factory):
        assert (
            metrics.classify_lateness(order_factory.create(expected_end=at(17, 12)))
            is LatenessClass.UPCOMING_WITHIN_7_DAYS
        )

    def test_scheduled_later(self, metrics, order_factory):
        assert (
            metrics.classify_lateness(order_factory.create(expected_end=at(18, 0)))
            is LatenessClass.SCHEDULED_LATER
        )

    def test_urgent_requires_priority_and_open_state(self, metrics, order_factory):
        assert metrics.is_urgent(order_factory.create(priority=4))
        assert not metrics.is_urgent(order_factory.create(priority=3))
        assert not metrics.is_urgent(order_factory.create(priority=5, state_code="CH"))


class TestSummarize:
    """Test dashboard aggregation."""

    def test_empty_set(self):
        summary = MetricsCalculator(clock=FixedClock(NOW)).summarize([])
        assert summary.total_orders == 0
        assert summary.by_state == {}

    def test_counts(self, order_factory):
        metrics = MetricsCalculator(clock=FixedClock(NOW), top_n=1)
        center = order_factory.create().work_center_id
        orders = [
            order_factory.create(
                work_center_id=center, state_code="PR", priority=5,
                produced_quantity=Decimal("50"), expected_end=NOW - timedelta(days=2),
            ),
            order_factory.create(
                work_center_id=center, state_code="PR", priority=4,
                expected_end=NOW - timedelta(days=1),
            ),
            order_factory.create(
                state_code="CH", priority=5, produced_quantity=Decimal("100"),
                actual_end=NOW,
            ),
            order_factory.create(state_code="ES", expected_end=None),
        ]

        summary = metrics.summarize(orders)

        assert summary.total_orders == 4
        assert summary.by_state == {"PR": 2, "CH": 1, "ES": 1}
        assert summary.by_center[center] == 2
        assert summary.urgent_count == 2
        assert summary.overdue_count == 2
        assert summary.by_lateness["no_deadline"] == 1
        assert summary.average_completion == Decimal("37.50")
        assert summary.centers[0].work_center_id == center
        assert summary.centers[0].in_progress == 2
        # top lists are truncated to top_n
        assert [o.priority for o in summary.urgent_orders] == [5]
        assert summary.overdue_orders[0].expected_end == NOW - timedelta(days=2)
