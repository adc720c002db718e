"""WorkCenter Pydantic schemas."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class WorkCenterResponse(BaseModel):
    """Work center as loaded by the persistence layer."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    code: str | None = None
    description: str
    active: bool = True
    hourly_capacity: int | None = None
    standard_hourly_cost: Decimal | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
