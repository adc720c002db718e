"""Scheduling board endpoints: drag-and-drop moves, state changes, progress."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from production_scheduler.api.v1.deps import get_scheduler, to_http_exception
from production_scheduler.domain import OrderStatus
from production_scheduler.schemas.schedule import (
    CalendarEvent,
    CalendarRoom,
    ChangeStateRequest,
    ChangeStateResult,
    ConflictQuery,
    ConflictResult,
    RescheduleRequest,
    RescheduleResult,
    UpdateProgressRequest,
    UpdateProgressResult,
)
from production_scheduler.services.errors import SchedulingError
from production_scheduler.services.metrics import order_completion
from production_scheduler.services.query_index import QueryIndex
from production_scheduler.services.scheduler import OrderScheduler

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.post("/reschedule", response_model=RescheduleResult)
async def reschedule_order(
    payload: RescheduleRequest,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> RescheduleResult:
    """Move an order to a new work center and/or time window.

    Overlapping orders are returned as conflicts alongside the updated order.
    """
    try:
        outcome = await scheduler.reschedule(
            payload.order_id, payload.work_center_id, payload.start, payload.end
        )
    except SchedulingError as exc:
        raise to_http_exception(exc)

    warnings = [
        f"Order {outcome.order.identifier} overlaps order {conflict_id} on the same work center."
        for conflict_id in outcome.conflicts
    ]
    return RescheduleResult(order=outcome.order, conflicts=outcome.conflicts, warnings=warnings)


@router.post("/state", response_model=ChangeStateResult)
async def change_order_state(
    payload: ChangeStateRequest,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> ChangeStateResult:
    """Move an order to another lifecycle state."""
    try:
        order = await scheduler.change_state(payload.order_id, payload.target_state_code)
    except SchedulingError as exc:
        raise to_http_exception(exc)
    return ChangeStateResult(order=order, state_label=OrderStatus(order.state_code).label)


@router.post("/progress", response_model=UpdateProgressResult)
async def update_order_progress(
    payload: UpdateProgressRequest,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> UpdateProgressResult:
    """Record the produced quantity of an order."""
    try:
        order = await scheduler.update_progress(payload.order_id, payload.produced_quantity)
    except SchedulingError as exc:
        raise to_http_exception(exc)
    return UpdateProgressResult(order=order, completion_percentage=order_completion(order))


@router.post("/conflicts", response_model=ConflictResult)
async def check_conflicts(
    payload: ConflictQuery,
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> ConflictResult:
    """Report which orders occupy a work center window."""
    try:
        conflicts = scheduler.conflicts_for(
            payload.work_center_id, payload.start, payload.end, payload.exclude_order_id
        )
    except SchedulingError as exc:
        raise to_http_exception(exc)
    return ConflictResult(
        work_center_id=payload.work_center_id,
        conflicts=conflicts,
        available=not conflicts,
    )


@router.get("/events", response_model=list[CalendarEvent])
async def list_calendar_events(
    start: datetime | None = Query(None),
    end: datetime | None = Query(None),
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> list[CalendarEvent]:
    """Orders intersecting the range, as scheduling board events.

    Defaults to 30 days on each side of today.
    """
    index = QueryIndex(clock=scheduler.clock)
    return index.calendar_events(scheduler.orders(), start, end)


@router.get("/centers", response_model=list[CalendarRoom])
async def list_calendar_centers(
    scheduler: OrderScheduler = Depends(get_scheduler),
) -> list[CalendarRoom]:
    """Active work centers as scheduling board rows."""
    return QueryIndex.calendar_rooms(scheduler.centers())
