"""Scheduling request/response Pydantic schemas."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

from production_scheduler.core.clock import ensure_aware
from production_scheduler.schemas.order import ScheduledOrder


class RescheduleRequest(BaseModel):
    """Move an order to a new work center and/or time window (drag and drop)."""

    order_id: uuid.UUID
    work_center_id: uuid.UUID | None = Field(
        default=None, description="Target center; omitted keeps the current one"
    )
    start: datetime
    end: datetime | None = None

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value)


class RescheduleResult(BaseModel):
    """Outcome of a reschedule; overlaps are reported, never rejected."""

    order: ScheduledOrder
    conflicts: list[uuid.UUID] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class ChangeStateRequest(BaseModel):
    order_id: uuid.UUID
    target_state_code: str = Field(..., min_length=1, max_length=2)


class ChangeStateResult(BaseModel):
    order: ScheduledOrder
    state_label: str


class UpdateProgressRequest(BaseModel):
    order_id: uuid.UUID
    produced_quantity: Decimal = Field(..., ge=0)


class UpdateProgressResult(BaseModel):
    order: ScheduledOrder
    completion_percentage: Decimal


class ConflictQuery(BaseModel):
    """Availability question for a work center window."""

    work_center_id: uuid.UUID
    start: datetime
    end: datetime | None = None
    exclude_order_id: uuid.UUID | None = None

    @field_validator("start", "end")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value)

    @model_validator(mode="after")
    def _check_window(self) -> "ConflictQuery":
        if self.end is not None and self.end < self.start:
            raise ValueError("end must not precede start")
        return self


class ConflictResult(BaseModel):
    work_center_id: uuid.UUID
    conflicts: list[uuid.UUID] = Field(default_factory=list)
    available: bool = True


class CalendarEvent(BaseModel):
    """An order rendered as an event on the scheduling board."""

    id: uuid.UUID
    subject: str
    description: str
    start_time: datetime
    end_time: datetime | None
    room_id: uuid.UUID
    category_color: str
    article_code: str
    article_description: str
    ordered_quantity: Decimal
    produced_quantity: Decimal
    completion_percentage: Decimal
    state_code: str
    state_label: str
    priority: int
    identifier: str
    notes: str
    cycle_time: float
    setup_time: float


class CalendarRoom(BaseModel):
    """A work center rendered as a row on the scheduling board."""

    id: uuid.UUID
    name: str
    color: str
    capacity: int
