"""Order listing Pydantic schemas."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from production_scheduler.domain import LatenessClass
from production_scheduler.schemas.order import ScheduledOrder


class OrderSortKey(str, Enum):
    """Stored fields the listing can be sorted by."""

    START = "start"
    EXPECTED_END = "expected_end"
    PRIORITY = "priority"
    ARTICLE_CODE = "article_code"
    IDENTIFIER = "identifier"


class OrderFilter(BaseModel):
    """Listing filters; unset fields do not constrain the result."""

    state_code: str | None = None
    operator_id: uuid.UUID | None = None
    work_center_id: uuid.UUID | None = None
    operation_type_id: uuid.UUID | None = None
    article: str | None = Field(
        default=None, description="Substring of the article code or description"
    )
    priority: int | None = Field(default=None, ge=1, le=5)
    start_from: datetime | None = None
    start_to: datetime | None = None
    expected_end_from: datetime | None = None
    expected_end_to: datetime | None = None


class OrderListItem(BaseModel):
    """A listed order with the fields derived after filtering."""

    order: ScheduledOrder
    identifier: str
    completion_percentage: Decimal
    lateness: LatenessClass


class OrderPage(BaseModel):
    items: list[OrderListItem] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 50
    total_pages: int = 0
