"""Order scheduler: the single write path for placements and lifecycle changes.

Every change to an order's work center, time window or state goes through
``OrderScheduler``. A change is applied in two steps:

1. The updated snapshot is persisted through the repository.
2. Only when persistence succeeds, the in-memory order record and its calendar
   entry are swapped in together, without any await in between.

A failed save therefore leaves nothing visible. Requests on the same order are
serialized by a per-order lock; requests on different orders run
independently.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from production_scheduler.core.clock import Clock, ensure_aware, utc_now
from production_scheduler.domain import OrderStatus
from production_scheduler.schemas.order import (
    OrderDetailsUpdate,
    ProductionOrderCreate,
    ScheduledOrder,
)
from production_scheduler.schemas.order_state import OrderStateResponse
from production_scheduler.schemas.query import OrderFilter
from production_scheduler.schemas.work_center import WorkCenterResponse
from production_scheduler.services.calendar import ResourceCalendar
from production_scheduler.services.errors import (
    InvalidQuantityError,
    InvalidWindowError,
    NotFoundError,
)
from production_scheduler.services.metrics import order_completion
from production_scheduler.services.repository import OrderRepository
from production_scheduler.services.state_machine import StateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RescheduleOutcome:
    """Rescheduled order plus the orders it now overlaps (warnings only)."""

    order: ScheduledOrder
    conflicts: list[uuid.UUID] = field(default_factory=list)


class OrderScheduler:
    """Coordinates the calendar, the state machine and persistence."""

    def __init__(
        self,
        repository: OrderRepository,
        calendar: ResourceCalendar | None = None,
        state_machine: StateMachine | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.repository = repository
        self.calendar = calendar or ResourceCalendar()
        self.clock = clock
        self.state_machine = state_machine or StateMachine(clock=clock)
        self._orders: dict[uuid.UUID, ScheduledOrder] = {}
        self._centers: dict[uuid.UUID, WorkCenterResponse] = {}
        self._states: list[OrderStateResponse] = []
        self._locks: dict[uuid.UUID, asyncio.Lock] = {}

    # ---------------------------------------------------------------
    # Loading & reads
    # ---------------------------------------------------------------

    async def load(self, filters: OrderFilter | None = None) -> int:
        """Hydrate orders, centers and states from the repository.

        When the repository knows its states, the state machine is rebuilt to
        recognize exactly those codes. Returns the number of orders loaded.
        """
        orders = await self.repository.load_orders(filters)
        centers = await self.repository.load_centers()
        states = await self.repository.load_states()

        self._centers = {center.id: center for center in centers}
        self._states = states
        if states:
            self.state_machine = StateMachine.from_states(
                states, self.state_machine.transitions, self.clock
            )
        self._orders = {order.id: order for order in orders}
        self.calendar.load(orders)
        logger.info(
            "Scheduler loaded %d order(s), %d center(s), %d state(s)",
            len(orders),
            len(centers),
            len(states),
        )
        return len(orders)

    def orders(self) -> list[ScheduledOrder]:
        """Snapshot of the current order set."""
        return list(self._orders.values())

    def get_order(self, order_id: uuid.UUID) -> ScheduledOrder:
        order = self._orders.get(order_id)
        if order is None:
            raise NotFoundError(f"Production order {order_id} not found")
        return order

    def centers(self) -> list[WorkCenterResponse]:
        return list(self._centers.values())

    def states(self) -> list[OrderStateResponse]:
        return list(self._states)

    def conflicts_for(
        self,
        center_id: uuid.UUID,
        start: datetime,
        end: datetime | None = None,
        exclude: uuid.UUID | None = None,
    ) -> list[uuid.UUID]:
        self._require_center(center_id)
        return self.calendar.conflicts_for(
            center_id, ensure_aware(start), ensure_aware(end), exclude
        )

    # ---------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------

    async def reschedule(
        self,
        order_id: uuid.UUID,
        new_center_id: uuid.UUID | None,
        new_start: datetime,
        new_end: datetime | None = None,
    ) -> RescheduleOutcome:
        """Move an order to a new center and/or window.

        The end lands on the actual end for closed orders and on the expected
        end otherwise; a closed order moved without an end keeps its actual
        end. Overlaps with other orders are returned, not rejected.
        """
        new_start = ensure_aware(new_start)
        new_end = ensure_aware(new_end)
        if new_end is not None and new_end < new_start:
            raise InvalidWindowError(
                f"Window end {new_end.isoformat()} precedes start {new_start.isoformat()}"
            )

        async with self._lock_for(order_id):
            current = self.get_order(order_id)
            center_id = current.work_center_id if new_center_id is None else new_center_id
            self._require_center(center_id)

            update: dict[str, object] = {"work_center_id": center_id, "start": new_start}
            if current.is_closed:
                # Without a new end the close timestamp stays.
                if new_end is not None:
                    update["actual_end"] = new_end
            else:
                update["expected_end"] = new_end

            saved = await self._save(current.model_copy(update=update))
            conflicts = self._publish(current, saved)

        if conflicts:
            logger.warning(
                "Order %s rescheduled on center %s overlapping %d order(s)",
                saved.identifier,
                center_id,
                len(conflicts),
            )
        else:
            logger.info(
                "Order %s rescheduled: center %s, start %s, end %s",
                saved.identifier,
                center_id,
                new_start.isoformat(),
                new_end.isoformat() if new_end else "-",
            )
        return RescheduleOutcome(order=saved, conflicts=conflicts)

    async def change_state(
        self, order_id: uuid.UUID, new_state: "str | OrderStatus"
    ) -> ScheduledOrder:
        """Apply a lifecycle transition; closing stamps the actual end once."""
        async with self._lock_for(order_id):
            current = self.get_order(order_id)
            updated = self.state_machine.apply(current, new_state)
            saved = await self._save(updated)
            self._publish(current, saved)

        logger.info(
            "Order %s state %s -> %s", saved.identifier, current.state_code, saved.state_code
        )
        return saved

    async def update_progress(
        self, order_id: uuid.UUID, produced_quantity: Decimal | int | float
    ) -> ScheduledOrder:
        """Record the produced quantity. Quantities above the ordered one are kept."""
        produced = (
            produced_quantity
            if isinstance(produced_quantity, Decimal)
            else Decimal(str(produced_quantity))
        )
        if produced < 0:
            raise InvalidQuantityError("Produced quantity cannot be negative")

        async with self._lock_for(order_id):
            current = self.get_order(order_id)
            saved = await self._save(
                current.model_copy(update={"produced_quantity": produced})
            )
            self._publish(current, saved)

        logger.info(
            "Order %s progress %s/%s (%s%%)",
            saved.identifier,
            saved.produced_quantity,
            saved.ordered_quantity,
            order_completion(saved),
        )
        return saved

    async def update_details(
        self, order_id: uuid.UUID, payload: OrderDetailsUpdate
    ) -> ScheduledOrder:
        """Edit fields that do not affect scheduling."""
        changes = payload.model_dump(exclude_unset=True)
        async with self._lock_for(order_id):
            current = self.get_order(order_id)
            if not changes:
                return current
            saved = await self._save(current.model_copy(update=changes))
            self._publish(current, saved)
        return saved

    async def create_order(self, payload: ProductionOrderCreate) -> RescheduleOutcome:
        """Register a new order in the Issued state and place it on its center."""
        self._require_center(payload.work_center_id)
        start = ensure_aware(payload.start)
        expected_end = ensure_aware(payload.expected_end)
        if expected_end is not None and expected_end < start:
            raise InvalidWindowError(
                f"Window end {expected_end.isoformat()} precedes start {start.isoformat()}"
            )

        order = ScheduledOrder(
            id=uuid.uuid4(),
            state_code=OrderStatus.ISSUED.value,
            **payload.model_dump(exclude={"start", "expected_end"}),
            start=start,
            expected_end=expected_end,
        )
        saved = await self.repository.add_order(order)
        self._orders[saved.id] = saved
        conflicts = self.calendar.insert(
            saved.work_center_id, saved.id, saved.start, saved.end
        ).conflicts
        logger.info("Order %s created on center %s", saved.identifier, saved.work_center_id)
        return RescheduleOutcome(order=saved, conflicts=conflicts)

    async def delete_order(self, order_id: uuid.UUID) -> None:
        """Hard-delete an order and free its calendar slot."""
        async with self._lock_for(order_id):
            current = self.get_order(order_id)
            await self.repository.delete_order(order_id)
            del self._orders[order_id]
            self.calendar.remove(current.work_center_id, order_id)
        self._locks.pop(order_id, None)
        logger.info("Order %s deleted", current.identifier)

    # ---------------------------------------------------------------
    # Helpers
    # ---------------------------------------------------------------

    def _lock_for(self, order_id: uuid.UUID) -> asyncio.Lock:
        # Unknown ids raise before a lock is created for them.
        self.get_order(order_id)
        lock = self._locks.get(order_id)
        if lock is None:
            lock = self._locks[order_id] = asyncio.Lock()
        return lock

    async def _save(self, order: ScheduledOrder) -> ScheduledOrder:
        try:
            return await self.repository.save_order(order)
        except Exception:
            logger.warning(
                "Saving order %s failed; in-memory state left unchanged", order.identifier
            )
            raise

    def _require_center(self, center_id: uuid.UUID) -> None:
        # With no centers loaded (embedded use) any id is accepted.
        if self._centers and center_id not in self._centers:
            raise NotFoundError(f"Work center {center_id} not found")

    def _publish(self, previous: ScheduledOrder, saved: ScheduledOrder) -> list[uuid.UUID]:
        """Swap in the saved record together with its calendar placement."""
        self._orders[saved.id] = saved
        return self.calendar.move(
            previous.work_center_id, saved.id, saved.work_center_id, saved.start, saved.end
        )
