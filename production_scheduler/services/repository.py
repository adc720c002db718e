"""Persistence collaborators consumed by the scheduling core.

``OrderRepository`` is the contract the scheduler relies on. Two
implementations ship with the package: an async SQLAlchemy one backed by
PostgreSQL and an in-memory one for tests and embedding.
"""

import logging
import uuid
from collections.abc import AsyncGenerator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Protocol

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from production_scheduler.domain import OrderStatus
from production_scheduler.models.order_state import OrderState
from production_scheduler.models.production_order import ProductionOrder
from production_scheduler.models.work_center import WorkCenter
from production_scheduler.schemas.order import ScheduledOrder
from production_scheduler.schemas.order_state import OrderStateResponse
from production_scheduler.schemas.query import OrderFilter
from production_scheduler.schemas.work_center import WorkCenterResponse
from production_scheduler.services.errors import (
    ConcurrencyConflictError,
    DuplicateOrderError,
    NotFoundError,
)
from production_scheduler.services.query_index import QueryIndex

logger = logging.getLogger(__name__)

# Columns the scheduler may change on an existing order.
MUTABLE_FIELDS = (
    "description",
    "ordered_quantity",
    "produced_quantity",
    "start",
    "actual_end",
    "expected_end",
    "priority",
    "notes",
    "state_code",
    "work_center_id",
    "operator_id",
)


class OrderRepository(Protocol):
    """What the scheduling core needs from persistence."""

    async def load_orders(self, filters: OrderFilter | None = None) -> list[ScheduledOrder]: ...

    async def save_order(self, order: ScheduledOrder) -> ScheduledOrder: ...

    async def add_order(self, order: ScheduledOrder) -> ScheduledOrder: ...

    async def delete_order(self, order_id: uuid.UUID) -> None: ...

    async def load_centers(self) -> list[WorkCenterResponse]: ...

    async def load_states(self) -> list[OrderStateResponse]: ...


def system_states() -> list[OrderStateResponse]:
    """The built-in lifecycle states with stable ids."""
    return [
        OrderStateResponse(
            id=uuid.uuid5(uuid.NAMESPACE_URL, f"order-state:{status.value}"),
            code=status.value,
            description=status.label,
            active=True,
            display_order=position,
        )
        for position, status in enumerate(OrderStatus, start=1)
    ]


# ---------------------------------------------------------------
# SQLAlchemy
# ---------------------------------------------------------------


class SqlAlchemyOrderRepository:
    """Order persistence on the async SQLAlchemy session factory.

    Each call runs in its own session and transaction; ``save_order`` relies on
    the row's version counter for optimistic concurrency.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def load_orders(self, filters: OrderFilter | None = None) -> list[ScheduledOrder]:
        query = select(ProductionOrder)
        if filters is not None:
            if filters.state_code:
                query = query.where(ProductionOrder.state_code == filters.state_code.upper())
            if filters.operator_id is not None:
                query = query.where(ProductionOrder.operator_id == filters.operator_id)
            if filters.work_center_id is not None:
                query = query.where(ProductionOrder.work_center_id == filters.work_center_id)
            if filters.operation_type_id is not None:
                query = query.where(
                    ProductionOrder.operation_type_id == filters.operation_type_id
                )
            if filters.article:
                pattern = f"%{filters.article}%"
                query = query.where(
                    or_(
                        ProductionOrder.article_code.ilike(pattern),
                        ProductionOrder.article_description.ilike(pattern),
                    )
                )
            if filters.priority is not None:
                query = query.where(ProductionOrder.priority == filters.priority)
            if filters.start_from is not None:
                query = query.where(ProductionOrder.start >= filters.start_from)
            if filters.start_to is not None:
                query = query.where(ProductionOrder.start <= filters.start_to)
            if filters.expected_end_from is not None:
                query = query.where(ProductionOrder.expected_end >= filters.expected_end_from)
            if filters.expected_end_to is not None:
                query = query.where(ProductionOrder.expected_end <= filters.expected_end_to)
        query = query.order_by(ProductionOrder.start.desc())

        async with self._session() as session:
            result = await session.execute(query)
            rows = list(result.scalars().all())
        return [ScheduledOrder.model_validate(row) for row in rows]

    async def save_order(self, order: ScheduledOrder) -> ScheduledOrder:
        try:
            async with self._session() as session:
                row = await session.get(ProductionOrder, order.id)
                if row is None:
                    raise NotFoundError(f"Production order {order.id} not found")
                if row.version != order.version:
                    raise ConcurrencyConflictError(
                        f"Production order {order.id} was modified by another user "
                        f"(version {row.version}, expected {order.version})"
                    )
                for field in MUTABLE_FIELDS:
                    setattr(row, field, getattr(order, field))
                await session.flush()
                saved = ScheduledOrder.model_validate(row)
        except StaleDataError as exc:
            raise ConcurrencyConflictError(
                f"Production order {order.id} was modified by another user"
            ) from exc
        return saved

    async def add_order(self, order: ScheduledOrder) -> ScheduledOrder:
        row = ProductionOrder(**order.model_dump(exclude={"version"}), version=1)
        try:
            async with self._session() as session:
                session.add(row)
                await session.flush()
                saved = ScheduledOrder.model_validate(row)
        except IntegrityError as exc:
            raise DuplicateOrderError(
                f"Order {order.identifier} already exists or references unknown records"
            ) from exc
        return saved

    async def delete_order(self, order_id: uuid.UUID) -> None:
        async with self._session() as session:
            row = await session.get(ProductionOrder, order_id)
            if row is None:
                raise NotFoundError(f"Production order {order_id} not found")
            await session.delete(row)

    async def load_centers(self) -> list[WorkCenterResponse]:
        async with self._session() as session:
            result = await session.execute(
                select(WorkCenter).order_by(WorkCenter.description)
            )
            rows = list(result.scalars().all())
        return [WorkCenterResponse.model_validate(row) for row in rows]

    async def load_states(self) -> list[OrderStateResponse]:
        async with self._session() as session:
            result = await session.execute(
                select(OrderState).order_by(OrderState.display_order, OrderState.code)
            )
            rows = list(result.scalars().all())
        return [OrderStateResponse.model_validate(row) for row in rows]


# ---------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------


class InMemoryOrderRepository:
    """Dictionary-backed repository with the same version semantics."""

    def __init__(
        self,
        orders: Iterable[ScheduledOrder] = (),
        centers: Iterable[WorkCenterResponse] = (),
        states: Iterable[OrderStateResponse] | None = None,
    ) -> None:
        self._orders: dict[uuid.UUID, ScheduledOrder] = {o.id: o for o in orders}
        self._centers: dict[uuid.UUID, WorkCenterResponse] = {c.id: c for c in centers}
        self._states = list(states) if states is not None else system_states()
        self.save_count = 0

    def get(self, order_id: uuid.UUID) -> ScheduledOrder | None:
        return self._orders.get(order_id)

    def add_center(self, center: WorkCenterResponse) -> None:
        self._centers[center.id] = center

    async def load_orders(self, filters: OrderFilter | None = None) -> list[ScheduledOrder]:
        return QueryIndex().filter(self._orders.values(), filters)

    async def save_order(self, order: ScheduledOrder) -> ScheduledOrder:
        current = self._orders.get(order.id)
        if current is None:
            raise NotFoundError(f"Production order {order.id} not found")
        if current.version != order.version:
            raise ConcurrencyConflictError(
                f"Production order {order.id} was modified by another user "
                f"(version {current.version}, expected {order.version})"
            )
        saved = order.model_copy(update={"version": order.version + 1})
        self._orders[order.id] = saved
        self.save_count += 1
        return saved

    async def add_order(self, order: ScheduledOrder) -> ScheduledOrder:
        if any(existing.identifier == order.identifier for existing in self._orders.values()):
            raise DuplicateOrderError(f"Order {order.identifier} already exists")
        saved = order.model_copy(update={"version": 1})
        self._orders[order.id] = saved
        return saved

    async def delete_order(self, order_id: uuid.UUID) -> None:
        if self._orders.pop(order_id, None) is None:
            raise NotFoundError(f"Production order {order_id} not found")

    async def load_centers(self) -> list[WorkCenterResponse]:
        return sorted(self._centers.values(), key=lambda c: c.description)

    async def load_states(self) -> list[OrderStateResponse]:
        return sorted(self._states, key=lambda s: (s.display_order, s.code))
