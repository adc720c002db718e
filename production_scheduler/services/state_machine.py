"""Order lifecycle state machine.

States: Issued (initial) -> InProgress -> Closed (terminal), with Suspended and
Urgent reachable from Issued/InProgress and returning to InProgress. Legal
moves live in a table of (from, to) pairs; the default table admits every
pair of known states, so a stricter graph can be swapped in without touching
callers.
"""

import logging
from collections.abc import Iterable

from production_scheduler.core.clock import Clock, utc_now
from production_scheduler.domain import OrderStatus
from production_scheduler.schemas.order import ScheduledOrder
from production_scheduler.schemas.order_state import OrderStateResponse
from production_scheduler.services.errors import InvalidTransitionError, UnknownStateError

logger = logging.getLogger(__name__)

TransitionTable = frozenset[tuple[OrderStatus, OrderStatus]]

PERMISSIVE_TRANSITIONS: TransitionTable = frozenset(
    (source, target) for source in OrderStatus for target in OrderStatus
)

# Reference graph for installations that want to forbid reopening closed orders.
STRICT_TRANSITIONS: TransitionTable = frozenset(
    {
        (OrderStatus.ISSUED, OrderStatus.IN_PROGRESS),
        (OrderStatus.ISSUED, OrderStatus.SUSPENDED),
        (OrderStatus.ISSUED, OrderStatus.URGENT),
        (OrderStatus.ISSUED, OrderStatus.CLOSED),
        (OrderStatus.IN_PROGRESS, OrderStatus.SUSPENDED),
        (OrderStatus.IN_PROGRESS, OrderStatus.URGENT),
        (OrderStatus.IN_PROGRESS, OrderStatus.CLOSED),
        (OrderStatus.SUSPENDED, OrderStatus.IN_PROGRESS),
        (OrderStatus.SUSPENDED, OrderStatus.CLOSED),
        (OrderStatus.URGENT, OrderStatus.IN_PROGRESS),
        (OrderStatus.URGENT, OrderStatus.CLOSED),
    }
)


class StateMachine:
    """Guards and applies lifecycle transitions on order snapshots."""

    def __init__(
        self,
        transitions: TransitionTable = PERMISSIVE_TRANSITIONS,
        clock: Clock = utc_now,
        known_codes: Iterable[str] | None = None,
    ) -> None:
        self._transitions = transitions
        self._clock = clock
        if known_codes is None:
            self._known = frozenset(OrderStatus)
        else:
            parsed = (OrderStatus.parse(code) for code in known_codes)
            self._known = frozenset(status for status in parsed if status is not None)

    @classmethod
    def from_states(
        cls,
        states: Iterable[OrderStateResponse],
        transitions: TransitionTable = PERMISSIVE_TRANSITIONS,
        clock: Clock = utc_now,
    ) -> "StateMachine":
        """Recognize only the state codes present in the persisted state table."""
        return cls(transitions, clock, known_codes=[s.code for s in states])

    @property
    def transitions(self) -> TransitionTable:
        return self._transitions

    def resolve(self, code: "str | OrderStatus") -> OrderStatus:
        status = OrderStatus.parse(code)
        if status is None or status not in self._known:
            raise UnknownStateError(f"Unknown order state {code!r}")
        return status

    def is_known(self, code: "str | OrderStatus") -> bool:
        status = OrderStatus.parse(code)
        return status is not None and status in self._known

    def can_transition(self, current: "str | OrderStatus", target: "str | OrderStatus") -> bool:
        source = OrderStatus.parse(current)
        destination = OrderStatus.parse(target)
        if source is None or destination is None:
            return False
        return (source, destination) in self._transitions

    def apply(self, order: ScheduledOrder, target: "str | OrderStatus") -> ScheduledOrder:
        """Return ``order`` moved to ``target``.

        Entering Closed stamps the actual end with the clock's time when it is
        still unset; leaving Closed keeps whatever actual end was recorded.
        """
        destination = self.resolve(target)
        # Orders carrying a legacy code outside the enumeration may always be
        # moved into a known state.
        source = OrderStatus.parse(order.state_code)
        if source is not None and not self.can_transition(source, destination):
            raise InvalidTransitionError(
                f"Order {order.id} cannot move from {order.state_code} to {destination.value}"
            )

        update: dict[str, object] = {"state_code": destination.value}
        if destination is OrderStatus.CLOSED and order.actual_end is None:
            update["actual_end"] = self._clock()
        logger.debug(
            "Order %s: %s -> %s", order.id, order.state_code, destination.value
        )
        return order.model_copy(update=update)
