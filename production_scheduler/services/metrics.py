"""Operational metrics derived from the current order set.

Everything here is recomputed on demand from order snapshots; nothing is
stored between calls.
"""

import uuid
from collections import Counter
from collections.abc import Iterable
from datetime import date, timedelta
from decimal import ROUND_HALF_EVEN, Decimal

from production_scheduler.core.clock import Clock, utc_now
from production_scheduler.core.config import settings
from production_scheduler.domain import LatenessClass, OrderStatus
from production_scheduler.schemas.metrics import CenterBreakdown, DashboardMetrics
from production_scheduler.schemas.order import ScheduledOrder

_HUNDRED = Decimal("100")
_CENT = Decimal("0.01")
ZERO_PERCENT = Decimal("0.00")


def _to_decimal(value: Decimal | int | float) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def completion_percentage(
    ordered: Decimal | int | float, produced: Decimal | int | float
) -> Decimal:
    """``produced / ordered * 100`` rounded to 2 decimals; 0 when nothing is ordered.

    Produced quantities above the ordered one are accepted and yield more
    than 100.
    """
    ordered_qty = _to_decimal(ordered)
    if ordered_qty <= 0:
        return ZERO_PERCENT
    ratio = _to_decimal(produced) / ordered_qty * _HUNDRED
    return ratio.quantize(_CENT, rounding=ROUND_HALF_EVEN)


def order_completion(order: ScheduledOrder) -> Decimal:
    return completion_percentage(order.ordered_quantity, order.produced_quantity)


class MetricsCalculator:
    """Lateness, urgency and aggregate statistics for dashboards."""

    def __init__(
        self,
        clock: Clock = utc_now,
        upcoming_days: int = settings.UPCOMING_WINDOW_DAYS,
        urgent_threshold: int = settings.URGENT_PRIORITY_THRESHOLD,
        top_n: int = settings.DASHBOARD_TOP_N,
    ) -> None:
        self.clock = clock
        self.upcoming_days = upcoming_days
        self.urgent_threshold = urgent_threshold
        self.top_n = top_n

    def today(self) -> date:
        return self.clock().date()

    def classify_lateness(
        self, order: ScheduledOrder, today: date | None = None
    ) -> LatenessClass:
        """Classify an order by its expected end date.

        Closed orders are never overdue; a closed order whose expected date
        already passed is reported as completed.
        """
        if order.expected_end is None:
            return LatenessClass.NO_DEADLINE

        today = today or self.today()
        deadline = order.expected_end.date()
        if deadline < today:
            return LatenessClass.COMPLETED if order.is_closed else LatenessClass.OVERDUE
        if deadline == today:
            return LatenessClass.DUE_TODAY
        if deadline <= today + timedelta(days=self.upcoming_days):
            return LatenessClass.UPCOMING_WITHIN_7_DAYS
        return LatenessClass.SCHEDULED_LATER

    def is_urgent(self, order: ScheduledOrder) -> bool:
        return order.priority >= self.urgent_threshold and not order.is_closed

    def summarize(
        self, orders: Iterable[ScheduledOrder], today: date | None = None
    ) -> DashboardMetrics:
        """Aggregate counts and top lists over ``orders``."""
        orders = list(orders)
        today = today or self.today()
        if not orders:
            return DashboardMetrics()

        lateness = {order.id: self.classify_lateness(order, today) for order in orders}
        by_state = Counter(order.state_code for order in orders)
        by_center = Counter(order.work_center_id for order in orders)
        by_lateness = Counter(cls.value for cls in lateness.values())

        urgent = [order for order in orders if self.is_urgent(order)]
        overdue = [order for order in orders if lateness[order.id] is LatenessClass.OVERDUE]

        completions = [order_completion(order) for order in orders]
        average = (sum(completions, Decimal("0")) / len(completions)).quantize(
            _CENT, rounding=ROUND_HALF_EVEN
        )

        return DashboardMetrics(
            total_orders=len(orders),
            by_state=dict(by_state),
            by_center=dict(by_center),
            by_lateness=dict(by_lateness),
            urgent_count=len(urgent),
            overdue_count=len(overdue),
            average_completion=average,
            centers=self._center_breakdown(orders),
            urgent_orders=sorted(urgent, key=lambda o: -o.priority)[: self.top_n],
            overdue_orders=sorted(overdue, key=lambda o: o.expected_end)[: self.top_n],
        )

    @staticmethod
    def _center_breakdown(orders: list[ScheduledOrder]) -> list[CenterBreakdown]:
        rows: dict[uuid.UUID, CenterBreakdown] = {}
        for order in orders:
            row = rows.setdefault(
                order.work_center_id, CenterBreakdown(work_center_id=order.work_center_id)
            )
            row.total += 1
            if order.state_code == OrderStatus.IN_PROGRESS.value:
                row.in_progress += 1
            elif order.state_code == OrderStatus.CLOSED.value:
                row.closed += 1
        return sorted(rows.values(), key=lambda r: -r.total)
