"""Production order Pydantic schemas."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from production_scheduler.domain import OrderStatus, priority_label


class ScheduledOrder(BaseModel):
    """Immutable snapshot of a production order as seen by the scheduling core.

    Built from ORM rows via ``from_attributes``; every mutation produces a new
    snapshot through ``model_copy``.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    order_type: str = Field(..., min_length=1, max_length=1)
    order_year: int
    order_series: str = Field(..., max_length=3)
    order_number: int = Field(..., ge=0)
    order_line: int = Field(..., ge=0)
    description: str | None = None

    article_code: str = Field(..., max_length=50)
    article_description: str = Field(..., max_length=50)
    unit_of_measure: str = Field(..., max_length=3)
    ordered_quantity: Decimal = Field(..., ge=0)
    produced_quantity: Decimal = Field(default=Decimal("0"), ge=0)
    cycle_time: float = Field(..., ge=0, description="Cycle time in seconds")
    setup_start: datetime | None = None
    setup_time: float | None = Field(default=None, description="Setup time in minutes")

    start: datetime
    actual_end: datetime | None = None
    expected_end: datetime | None = None
    priority: int = Field(default=2, ge=1, le=5)
    hourly_cost: Decimal | None = None
    actual_time: float | None = None
    notes: str | None = None

    state_code: str = OrderStatus.ISSUED.value
    work_center_id: uuid.UUID
    operation_type_id: uuid.UUID
    operator_id: uuid.UUID | None = None
    version: int = 1

    @property
    def is_closed(self) -> bool:
        status = OrderStatus.parse(self.state_code)
        return status is not None and status.is_terminal

    @property
    def end(self) -> datetime | None:
        """Authoritative end: actual end once closed, expected end otherwise."""
        return self.actual_end if self.is_closed else self.expected_end

    @property
    def identifier(self) -> str:
        return (
            f"{self.order_type}{self.order_year}/{self.order_series}/"
            f"{self.order_number:06d}-{self.order_line}"
        )

    @property
    def priority_label(self) -> str:
        return priority_label(self.priority)


class ProductionOrderCreate(BaseModel):
    """Schema for creating a production order. New orders start as Issued."""

    order_type: str = Field(..., min_length=1, max_length=1)
    order_year: int = Field(..., ge=1900, le=9999)
    order_series: str = Field(..., max_length=3)
    order_number: int = Field(..., ge=0)
    order_line: int = Field(..., ge=0)
    description: str | None = Field(default=None, max_length=100)
    article_code: str = Field(..., max_length=50)
    article_description: str = Field(..., max_length=50)
    unit_of_measure: str = Field(..., max_length=3)
    ordered_quantity: Decimal = Field(..., ge=0)
    produced_quantity: Decimal = Field(default=Decimal("0"), ge=0)
    cycle_time: float = Field(..., ge=0)
    setup_start: datetime | None = None
    setup_time: float | None = Field(default=None, ge=0)
    start: datetime
    expected_end: datetime | None = None
    priority: int = Field(default=2, ge=1, le=5)
    hourly_cost: Decimal | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=400)
    work_center_id: uuid.UUID
    operation_type_id: uuid.UUID
    operator_id: uuid.UUID | None = None


class OrderDetailsUpdate(BaseModel):
    """Non-scheduling field edits (quantity, notes, description)."""

    ordered_quantity: Decimal | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=100)
    notes: str | None = Field(default=None, max_length=400)

    @field_validator("ordered_quantity")
    @classmethod
    def _quantity_not_null(cls, value: Decimal | None) -> Decimal:
        # Omit the field to leave the quantity unchanged.
        if value is None:
            raise ValueError("ordered_quantity cannot be null")
        return value


class ProductionOrderResponse(BaseModel):
    """Schema for production order responses, with derived fields."""

    order: ScheduledOrder
    identifier: str
    priority_label: str
    completion_percentage: Decimal
    lateness: str
