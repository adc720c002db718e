"""ProductionOrder SQLAlchemy model."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from production_scheduler.core.database import Base


class ProductionOrder(Base):
    """Manufacturing order line placed on a work center."""

    __tablename__ = "production_orders"
    __table_args__ = (
        UniqueConstraint(
            "order_type",
            "order_year",
            "order_series",
            "order_number",
            "order_line",
            name="uq_production_orders_business_key",
        ),
        Index("ix_production_orders_work_center_start", "work_center_id", "start"),
        Index("ix_production_orders_state_code", "state_code"),
        Index("ix_production_orders_expected_end", "expected_end"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # Business key
    order_type: Mapped[str] = mapped_column(String(1), nullable=False)
    order_year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    order_series: Mapped[str] = mapped_column(String(3), nullable=False)
    order_number: Mapped[int] = mapped_column(Integer, nullable=False)
    order_line: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(100), nullable=True)

    article_code: Mapped[str] = mapped_column(String(50), nullable=False)
    article_description: Mapped[str] = mapped_column(String(50), nullable=False)
    unit_of_measure: Mapped[str] = mapped_column(String(3), nullable=False)
    ordered_quantity: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False)
    produced_quantity: Mapped[Decimal] = mapped_column(
        Numeric(10, 3), nullable=False, default=Decimal("0"), server_default="0"
    )
    cycle_time: Mapped[float] = mapped_column(
        Float, nullable=False, comment="Cycle time in seconds"
    )
    setup_start: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    setup_time: Mapped[float | None] = mapped_column(
        Float, nullable=True, comment="Setup time in minutes"
    )

    start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    actual_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    expected_end: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=2, server_default="2"
    )
    hourly_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    actual_time: Mapped[float | None] = mapped_column(
        Float, nullable=True, comment="Time actually spent in seconds"
    )
    notes: Mapped[str | None] = mapped_column(String(400), nullable=True)

    state_code: Mapped[str] = mapped_column(
        String(2),
        ForeignKey("order_states.code", ondelete="RESTRICT"),
        nullable=False,
        default="ES",
        server_default="ES",
    )
    work_center_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("work_centers.id", ondelete="RESTRICT"),
        nullable=False,
    )
    operation_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("operation_types.id", ondelete="RESTRICT"),
        nullable=False,
    )
    operator_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("operators.id", ondelete="SET NULL"),
        nullable=True,
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    state: Mapped["OrderState"] = relationship()
    work_center: Mapped["WorkCenter"] = relationship()
    operation_type: Mapped["OperationType"] = relationship()
    operator: Mapped["Operator"] = relationship()

    __mapper_args__ = {"version_id_col": version}
