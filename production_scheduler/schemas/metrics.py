"""Dashboard metrics Pydantic schemas."""

import uuid
from decimal import Decimal

from pydantic import BaseModel, Field

from production_scheduler.schemas.order import ScheduledOrder


class CenterBreakdown(BaseModel):
    """Order counts for one work center."""

    work_center_id: uuid.UUID
    total: int = 0
    in_progress: int = 0
    closed: int = 0


class DashboardMetrics(BaseModel):
    """Aggregates derived from the current order set."""

    total_orders: int = 0
    by_state: dict[str, int] = Field(default_factory=dict)
    by_center: dict[uuid.UUID, int] = Field(default_factory=dict)
    by_lateness: dict[str, int] = Field(default_factory=dict)
    urgent_count: int = 0
    overdue_count: int = 0
    average_completion: Decimal = Decimal("0")
    centers: list[CenterBreakdown] = Field(default_factory=list)
    urgent_orders: list[ScheduledOrder] = Field(default_factory=list)
    overdue_orders: list[ScheduledOrder] = Field(default_factory=list)
