"""Per-work-center calendar of scheduled order intervals.

Windows are half-open ``[start, end)``. An interval without an end, or whose
end does not come after its start, is a point reservation at ``start``: it
collides with any window containing that instant and with points at the same
instant.

Overlaps are reported to the caller and never rejected; prioritizing between
overlapping orders is left to the human planner, so order priority plays no
part here.

The calendar state is an immutable snapshot. Writers build a new snapshot under
a lock and publish it with a single assignment, so readers need no lock and a
``move`` between two centers is never observed half-done.
"""

import bisect
import logging
import threading
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import NamedTuple

from production_scheduler.schemas.order import ScheduledOrder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Interval:
    """A reservation of a work center by one order."""

    order_id: uuid.UUID
    start: datetime
    end: datetime | None = None

    @property
    def is_point(self) -> bool:
        return self.end is None or self.end <= self.start

    def overlaps(self, start: datetime, end: datetime | None) -> bool:
        return windows_overlap(self.start, self.end, start, end)


def windows_overlap(
    a_start: datetime,
    a_end: datetime | None,
    b_start: datetime,
    b_end: datetime | None,
) -> bool:
    """Whether two half-open windows (or point reservations) collide."""
    a_point = a_end is None or a_end <= a_start
    b_point = b_end is None or b_end <= b_start
    if a_point and b_point:
        return a_start == b_start
    if a_point:
        return b_start <= a_start < b_end
    if b_point:
        return a_start <= b_start < a_end
    return a_start < b_end and b_start < a_end


def _sort_key(interval: Interval) -> tuple[datetime, str]:
    return interval.start, str(interval.order_id)


class InsertResult(NamedTuple):
    """Orders already overlapping the inserted window. ``ok`` is always true."""

    conflicts: list[uuid.UUID]
    ok: bool = True


@dataclass(frozen=True, slots=True)
class _Snapshot:
    slots: Mapping[uuid.UUID, tuple[Interval, ...]]
    locations: Mapping[uuid.UUID, uuid.UUID]


_EMPTY = _Snapshot(MappingProxyType({}), MappingProxyType({}))


class ResourceCalendar:
    """Intervals per work center, with conflict queries."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._snapshot = _EMPTY

    # ---------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------

    def conflicts_for(
        self,
        center_id: uuid.UUID,
        start: datetime,
        end: datetime | None = None,
        exclude: uuid.UUID | None = None,
    ) -> list[uuid.UUID]:
        """Orders on ``center_id`` whose interval collides with the window."""
        return _collect_conflicts(
            self._snapshot.slots.get(center_id, ()), start, end, exclude
        )

    def is_available(
        self,
        center_id: uuid.UUID,
        start: datetime,
        end: datetime | None = None,
        exclude: uuid.UUID | None = None,
    ) -> bool:
        return not self.conflicts_for(center_id, start, end, exclude)

    def intervals(self, center_id: uuid.UUID) -> tuple[Interval, ...]:
        return self._snapshot.slots.get(center_id, ())

    def location_of(self, order_id: uuid.UUID) -> uuid.UUID | None:
        return self._snapshot.locations.get(order_id)

    def centers(self) -> list[uuid.UUID]:
        return [center for center, entries in self._snapshot.slots.items() if entries]

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._snapshot.locations

    def __len__(self) -> int:
        return len(self._snapshot.locations)

    # ---------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------

    def insert(
        self,
        center_id: uuid.UUID,
        order_id: uuid.UUID,
        start: datetime,
        end: datetime | None = None,
    ) -> InsertResult:
        """Place an order on a center and report who it overlaps.

        An order occupies a single slot: inserting one that is already placed
        elsewhere relocates it.
        """
        with self._lock:
            slots = dict(self._snapshot.slots)
            locations = dict(self._snapshot.locations)
            _detach(slots, locations, order_id)
            conflicts = _attach(slots, locations, center_id, Interval(order_id, start, end))
            self._publish(slots, locations)

        if conflicts:
            logger.debug(
                "Order %s on center %s overlaps %d order(s)",
                order_id,
                center_id,
                len(conflicts),
            )
        return InsertResult(conflicts)

    def remove(self, center_id: uuid.UUID, order_id: uuid.UUID) -> None:
        """Drop an order's interval from a center; no-op when it is not there."""
        with self._lock:
            if self._snapshot.locations.get(order_id) != center_id:
                return
            slots = dict(self._snapshot.slots)
            locations = dict(self._snapshot.locations)
            _detach(slots, locations, order_id)
            self._publish(slots, locations)

    def move(
        self,
        center_id: uuid.UUID,
        order_id: uuid.UUID,
        new_center_id: uuid.UUID,
        new_start: datetime,
        new_end: datetime | None = None,
    ) -> list[uuid.UUID]:
        """Remove from ``center_id`` and insert into ``new_center_id`` in one step."""
        with self._lock:
            slots = dict(self._snapshot.slots)
            locations = dict(self._snapshot.locations)
            if locations.get(order_id) not in (None, center_id):
                logger.warning(
                    "Order %s expected on center %s but found on %s",
                    order_id,
                    center_id,
                    locations[order_id],
                )
            _detach(slots, locations, order_id)
            conflicts = _attach(
                slots, locations, new_center_id, Interval(order_id, new_start, new_end)
            )
            self._publish(slots, locations)
        return conflicts

    def load(self, orders: Iterable[ScheduledOrder]) -> None:
        """Replace the whole calendar with the placements of ``orders``."""
        slots: dict[uuid.UUID, list[Interval]] = {}
        locations: dict[uuid.UUID, uuid.UUID] = {}
        for order in orders:
            slots.setdefault(order.work_center_id, []).append(
                Interval(order.id, order.start, order.end)
            )
            locations[order.id] = order.work_center_id
        frozen = {
            center: tuple(sorted(entries, key=_sort_key))
            for center, entries in slots.items()
        }
        with self._lock:
            self._publish(frozen, locations)
        logger.info(
            "Calendar loaded: %d order(s) on %d center(s)", len(locations), len(frozen)
        )

    def clear(self) -> None:
        with self._lock:
            self._snapshot = _EMPTY

    def _publish(
        self,
        slots: dict[uuid.UUID, tuple[Interval, ...]],
        locations: dict[uuid.UUID, uuid.UUID],
    ) -> None:
        self._snapshot = _Snapshot(MappingProxyType(slots), MappingProxyType(locations))


def _collect_conflicts(
    entries: Iterable[Interval],
    start: datetime,
    end: datetime | None,
    exclude: uuid.UUID | None,
) -> list[uuid.UUID]:
    return [
        entry.order_id
        for entry in entries
        if entry.order_id != exclude and entry.overlaps(start, end)
    ]


def _detach(
    slots: dict[uuid.UUID, tuple[Interval, ...]],
    locations: dict[uuid.UUID, uuid.UUID],
    order_id: uuid.UUID,
) -> None:
    center_id = locations.pop(order_id, None)
    if center_id is None:
        return
    remaining = tuple(e for e in slots.get(center_id, ()) if e.order_id != order_id)
    if remaining:
        slots[center_id] = remaining
    else:
        slots.pop(center_id, None)


def _attach(
    slots: dict[uuid.UUID, tuple[Interval, ...]],
    locations: dict[uuid.UUID, uuid.UUID],
    center_id: uuid.UUID,
    interval: Interval,
) -> list[uuid.UUID]:
    entries = list(slots.get(center_id, ()))
    conflicts = _collect_conflicts(entries, interval.start, interval.end, interval.order_id)
    bisect.insort(entries, interval, key=_sort_key)
    slots[center_id] = tuple(entries)
    locations[interval.order_id] = center_id
    return conflicts
