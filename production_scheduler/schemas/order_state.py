"""OrderState Pydantic schemas."""

import uuid

from pydantic import BaseModel, ConfigDict


class OrderStateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: uuid.UUID
    code: str
    description: str
    active: bool = True
    display_order: int = 0
