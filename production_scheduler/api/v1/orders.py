"""Production order endpoints: listing, details and non-scheduling edits."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from production_scheduler.api.v1.deps import get_scheduler, to_http_exception
from production_scheduler.core.config import settings
from production_scheduler.schemas.order import (
    OrderDetailsUpdate,
    ProductionOrderCreate,
    ProductionOrderResponse,
    ScheduledOrder,
)
from production_scheduler.schemas.query import OrderFilter, OrderPage, OrderSortKey
from production_scheduler.schemas.schedule import RescheduleResult
from production_scheduler.services.errors import SchedulingError
from production_scheduler.services.metrics import MetricsCalculator, order_completion
from production_scheduler.services.query_index import QueryIndex
from production_scheduler.services.scheduler import OrderScheduler

router = APIRouter(prefix="/orders", tags=["orders"])


def _to_response(order: ScheduledOrder, metrics: MetricsCalculator) -> ProductionOrderResponse:
    return ProductionOrderResponse(
        order=order,
        identifier=order.identifier,
        priority_label=order.priority_label,
        completion_percentage=order_completion(order),
        lateness=metrics.classify_lateness(order).value,
    )


@router.get("", response_model=OrderPage)
async def list_orders(
    state_code: str | None = Query(None, alias="state"),
    operator_id: uuid.UUID | None = Query(None),
    work_center_id: uuid.UUID | None = Query(None),
    operation_type_id: uuid.UUID | None = Query(None),
    article: str | None = Query(None),
    priority: int | None = Query(None, ge=1, le=5),
    start_from: datetime | None = Query(None),
    start_to: datetime | None = Query(None),
    expected_end_from: datetime | None = Query(None),
    expected_end_to: datetime | None = Query(None),
    sort: OrderSortKey = Query(OrderSortKey.START),
    descending: bool = Query(True),
    page: int = Query(1, ge=1),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> OrderPage:
    """List orders with filters, sorting and pagination (most recent start first)."""
    filters = OrderFilter(
        state_code=state_code,
        operator_id=operator_id,
        work_center_id=work_center_id,
        operation_type_id=operation_type_id,
        article=article,
        priority=priority,
        start_from=start_from,
        start_to=start_to,
        expected_end_from=expected_end_from,
        expected_end_to=expected_end_to,
    )
    index = QueryIndex(clock=scheduler.clock)
    try:
        return index.query(scheduler.orders(), filters, sort, descending, page, page_size)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@router.post("", response_model=RescheduleResult, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: ProductionOrderCreate,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> RescheduleResult:
    """Create a new order in the Issued state."""
    try:
        outcome = await scheduler.create_order(payload)
    except SchedulingError as exc:
        raise to_http_exception(exc)
    return RescheduleResult(order=outcome.order, conflicts=outcome.conflicts)


@router.get("/{order_id}", response_model=ProductionOrderResponse)
async def get_order(
    order_id: uuid.UUID,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> ProductionOrderResponse:
    """Get a single order with its derived fields."""
    try:
        order = scheduler.get_order(order_id)
    except SchedulingError as exc:
        raise to_http_exception(exc)
    return _to_response(order, MetricsCalculator(clock=scheduler.clock))


@router.patch("/{order_id}", response_model=ProductionOrderResponse)
async def update_order_details(
    order_id: uuid.UUID,
    payload: OrderDetailsUpdate,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> ProductionOrderResponse:
    """Edit quantity, description or notes without touching the schedule."""
    try:
        order = await scheduler.update_details(order_id, payload)
    except SchedulingError as exc:
        raise to_http_exception(exc)
    return _to_response(order, MetricsCalculator(clock=scheduler.clock))


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: uuid.UUID,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> None:
    """Delete an order and free its calendar slot."""
    try:
        await scheduler.delete_order(order_id)
    except SchedulingError as exc:
        raise to_http_exception(exc)
