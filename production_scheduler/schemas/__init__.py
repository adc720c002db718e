"""Pydantic v2 schemas for request/response validation."""

from production_scheduler.schemas.metrics import CenterBreakdown, DashboardMetrics
from production_scheduler.schemas.order import (
    OrderDetailsUpdate,
    ProductionOrderCreate,
    ProductionOrderResponse,
    ScheduledOrder,
)
from production_scheduler.schemas.order_state import OrderStateResponse
from production_scheduler.schemas.query import OrderFilter, OrderListItem, OrderPage, OrderSortKey
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
from production_scheduler.schemas.work_center import WorkCenterResponse

__all__ = [
    "CalendarEvent",
    "CalendarRoom",
    "CenterBreakdown",
    "ChangeStateRequest",
    "ChangeStateResult",
    "ConflictQuery",
    "ConflictResult",
    "DashboardMetrics",
    "OrderDetailsUpdate",
    "OrderFilter",
    "OrderListItem",
    "OrderPage",
    "OrderSortKey",
    "OrderStateResponse",
    "ProductionOrderCreate",
    "ProductionOrderResponse",
    "RescheduleRequest",
    "RescheduleResult",
    "ScheduledOrder",
    "UpdateProgressRequest",
    "UpdateProgressResult",
    "WorkCenterResponse",
]
