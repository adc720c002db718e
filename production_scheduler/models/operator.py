"""Operator SQLAlchemy model."""

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, Integer, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from production_scheduler.core.database import Base


class Operator(Base):
    """Shop-floor operator that can be assigned to production orders."""

    __tablename__ = "operators"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="true"
    )
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    competence_level: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="1-5, informational only"
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
