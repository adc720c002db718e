"""Error taxonomy of the scheduling core.

Overlapping orders are not errors; they travel as conflict lists next to a
successful result.
"""


class SchedulingError(Exception):
    """Base class for failures the presentation layer reports to the user."""

    kind = "scheduling_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_detail(self) -> dict[str, str]:
        return {"error": self.kind, "message": self.message}


class NotFoundError(SchedulingError):
    """Unknown order, work center or state id."""

    kind = "not_found"


class InvalidWindowError(SchedulingError):
    """Requested window ends before it starts."""

    kind = "invalid_window"


class UnknownStateError(SchedulingError):
    """Target state code is not a recognized lifecycle state."""

    kind = "unknown_state"


class InvalidTransitionError(SchedulingError):
    """The transition table forbids moving between the two states."""

    kind = "invalid_transition"


class InvalidQuantityError(SchedulingError):
    kind = "invalid_quantity"


class ConcurrencyConflictError(SchedulingError):
    """The stored order changed since it was loaded (optimistic concurrency)."""

    kind = "concurrency_conflict"


class DuplicateOrderError(SchedulingError):
    """Another order already uses the same type/year/series/number/line key."""

    kind = "duplicate_order"
