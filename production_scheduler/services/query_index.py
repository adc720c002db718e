"""Filterable, sortable and paginated views over the order set.

Only stored fields are sortable. Completion percentage and lateness are
derived after filtering and sorting, on the page being returned.
"""

import math
from collections.abc import Iterable
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from production_scheduler.core.clock import Clock, ensure_aware, utc_now
from production_scheduler.core.config import settings
from production_scheduler.domain import OrderStatus, center_color, state_color
from production_scheduler.schemas.order import ScheduledOrder
from production_scheduler.schemas.query import OrderFilter, OrderListItem, OrderPage, OrderSortKey
from production_scheduler.schemas.schedule import CalendarEvent, CalendarRoom
from production_scheduler.schemas.work_center import WorkCenterResponse
from production_scheduler.services.calendar import windows_overlap
from production_scheduler.services.metrics import MetricsCalculator, order_completion


def _matches(order: ScheduledOrder, filters: OrderFilter) -> bool:
    if filters.state_code and order.state_code != filters.state_code.strip().upper():
        return False
    if filters.operator_id is not None and order.operator_id != filters.operator_id:
        return False
    if filters.work_center_id is not None and order.work_center_id != filters.work_center_id:
        return False
    if (
        filters.operation_type_id is not None
        and order.operation_type_id != filters.operation_type_id
    ):
        return False
    if filters.article:
        needle = filters.article.casefold()
        if (
            needle not in order.article_code.casefold()
            and needle not in order.article_description.casefold()
        ):
            return False
    if filters.priority is not None and order.priority != filters.priority:
        return False

    start_from = ensure_aware(filters.start_from)
    start_to = ensure_aware(filters.start_to)
    if start_from is not None and order.start < start_from:
        return False
    if start_to is not None and order.start > start_to:
        return False

    end_from = ensure_aware(filters.expected_end_from)
    end_to = ensure_aware(filters.expected_end_to)
    if end_from is not None or end_to is not None:
        if order.expected_end is None:
            return False
        if end_from is not None and order.expected_end < end_from:
            return False
        if end_to is not None and order.expected_end > end_to:
            return False
    return True


def _sort_value(order: ScheduledOrder, key: OrderSortKey) -> Any:
    if key is OrderSortKey.START:
        return order.start
    if key is OrderSortKey.EXPECTED_END:
        return order.expected_end
    if key is OrderSortKey.PRIORITY:
        return order.priority
    if key is OrderSortKey.ARTICLE_CODE:
        return order.article_code
    return (
        order.order_type,
        order.order_year,
        order.order_series,
        order.order_number,
        order.order_line,
    )


def _quantity_text(quantity: Decimal) -> str:
    return format(quantity.normalize(), "f")


class QueryIndex:
    """Listing and board views over order snapshots."""

    def __init__(
        self,
        metrics: MetricsCalculator | None = None,
        clock: Clock = utc_now,
        default_page_size: int = settings.DEFAULT_PAGE_SIZE,
        calendar_range_days: int = settings.CALENDAR_RANGE_DAYS,
    ) -> None:
        self.clock = clock
        self.metrics = metrics or MetricsCalculator(clock=clock)
        self.default_page_size = default_page_size
        self.calendar_range_days = calendar_range_days

    def filter(
        self, orders: Iterable[ScheduledOrder], filters: OrderFilter | None = None
    ) -> list[ScheduledOrder]:
        if filters is None:
            return list(orders)
        return [order for order in orders if _matches(order, filters)]

    def sort(
        self,
        orders: Iterable[ScheduledOrder],
        key: OrderSortKey = OrderSortKey.START,
        descending: bool = True,
    ) -> list[ScheduledOrder]:
        """Sort by a stored field; orders missing the field always come last.

        Ties fall back to the order id so paging over a stable set is
        deterministic.
        """
        present: list[ScheduledOrder] = []
        missing: list[ScheduledOrder] = []
        for order in orders:
            (missing if _sort_value(order, key) is None else present).append(order)
        present.sort(key=lambda o: (_sort_value(o, key), str(o.id)), reverse=descending)
        missing.sort(key=lambda o: str(o.id))
        return present + missing

    def query(
        self,
        orders: Iterable[ScheduledOrder],
        filters: OrderFilter | None = None,
        sort: OrderSortKey = OrderSortKey.START,
        descending: bool = True,
        page: int = 1,
        page_size: int | None = None,
    ) -> OrderPage:
        """Filter, sort and slice one page. Pages past the end are empty."""
        page_size = self.default_page_size if page_size is None else page_size
        if page < 1:
            raise ValueError("page must be a positive integer")
        if page_size < 1:
            raise ValueError("page_size must be a positive integer")

        ordered = self.sort(self.filter(orders, filters), sort, descending)
        offset = (page - 1) * page_size
        today = self.metrics.today()
        items = [
            OrderListItem(
                order=order,
                identifier=order.identifier,
                completion_percentage=order_completion(order),
                lateness=self.metrics.classify_lateness(order, today),
            )
            for order in ordered[offset : offset + page_size]
        ]
        return OrderPage(
            items=items,
            total=len(ordered),
            page=page,
            page_size=page_size,
            total_pages=math.ceil(len(ordered) / page_size),
        )

    # ---------------------------------------------------------------
    # Scheduling board
    # ---------------------------------------------------------------

    def calendar_events(
        self,
        orders: Iterable[ScheduledOrder],
        range_start: datetime | None = None,
        range_end: datetime | None = None,
    ) -> list[CalendarEvent]:
        """Orders whose window intersects the range, as board events.

        The range defaults to a window of ``calendar_range_days`` on each side
        of today.
        """
        now = self.clock()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        range_start = ensure_aware(range_start) or midnight - timedelta(
            days=self.calendar_range_days
        )
        range_end = ensure_aware(range_end) or midnight + timedelta(
            days=self.calendar_range_days
        )

        events: list[CalendarEvent] = []
        for order in orders:
            if not windows_overlap(order.start, order.end, range_start, range_end):
                continue
            status = OrderStatus.parse(order.state_code)
            events.append(
                CalendarEvent(
                    id=order.id,
                    subject=f"{order.article_code} Qty: {_quantity_text(order.ordered_quantity)}",
                    description=order.description or "",
                    start_time=order.start,
                    end_time=order.end,
                    room_id=order.work_center_id,
                    category_color=state_color(order.state_code),
                    article_code=order.article_code,
                    article_description=order.article_description,
                    ordered_quantity=order.ordered_quantity,
                    produced_quantity=order.produced_quantity,
                    completion_percentage=order_completion(order),
                    state_code=order.state_code,
                    state_label=status.label if status is not None else order.state_code,
                    priority=order.priority,
                    identifier=order.identifier,
                    notes=order.notes or "",
                    cycle_time=order.cycle_time,
                    setup_time=order.setup_time or 0.0,
                )
            )
        events.sort(key=lambda e: (e.start_time, str(e.id)))
        return events

    @staticmethod
    def calendar_rooms(centers: Iterable[WorkCenterResponse]) -> list[CalendarRoom]:
        """Active work centers as board rows, ordered by description."""
        active = sorted(
            (center for center in centers if center.active),
            key=lambda c: c.description,
        )
        return [
            CalendarRoom(
                id=center.id,
                name=center.description,
                color=center_color(index),
                capacity=center.hourly_capacity or 1,
            )
            for index, center in enumerate(active)
        ]
