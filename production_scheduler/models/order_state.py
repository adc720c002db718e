"""OrderState SQLAlchemy model."""

import uuid

from sqlalchemy import Boolean, Integer, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from production_scheduler.core.database import Base


class OrderState(Base):
    """Lifecycle state a production order can be in (ES, PR, CH, SO, UR)."""

    __tablename__ = "order_states"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    code: Mapped[str] = mapped_column(String(2), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(String(20), nullable=False)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="true"
    )
    display_order: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default="0"
    )
