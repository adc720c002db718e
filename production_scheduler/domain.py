"""Enumerations and lookup tables shared by the scheduling core."""

from enum import Enum, IntEnum


class OrderStatus(str, Enum):
    """Lifecycle states of a production order, keyed by their persisted code."""

    ISSUED = "ES"
    IN_PROGRESS = "PR"
    CLOSED = "CH"
    SUSPENDED = "SO"
    URGENT = "UR"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return _STATUS_COLORS[self]

    @property
    def is_terminal(self) -> bool:
        return self is OrderStatus.CLOSED

    @classmethod
    def parse(cls, code: "str | OrderStatus") -> "OrderStatus | None":
        """Return the status for a code, or None when the code is unknown."""
        if isinstance(code, OrderStatus):
            return code
        try:
            return cls(code.strip().upper())
        except (AttributeError, ValueError):
            return None


_STATUS_LABELS = {
    OrderStatus.ISSUED: "Issued",
    OrderStatus.IN_PROGRESS: "In Progress",
    OrderStatus.CLOSED: "Closed",
    OrderStatus.SUSPENDED: "Suspended",
    OrderStatus.URGENT: "Urgent",
}

_STATUS_COLORS = {
    OrderStatus.ISSUED: "#FFA500",
    OrderStatus.IN_PROGRESS: "#1E90FF",
    OrderStatus.CLOSED: "#32CD32",
    OrderStatus.SUSPENDED: "#FF6347",
    OrderStatus.URGENT: "#9932CC",
}

UNKNOWN_STATE_COLOR = "#808080"


class OrderPriority(IntEnum):
    """Priority levels, 1 (lowest) to 5 (most urgent)."""

    LOW = 1
    NORMAL = 2
    MEDIUM = 3
    HIGH = 4
    URGENT = 5

    @property
    def label(self) -> str:
        return self.name.capitalize()


def priority_label(priority: int | None) -> str:
    """Human label for a raw priority value."""
    try:
        return OrderPriority(priority).label
    except ValueError:
        return "Undefined"


def state_color(code: str) -> str:
    status = OrderStatus.parse(code)
    return status.color if status is not None else UNKNOWN_STATE_COLOR


# Row tints for work centers on the scheduling board
CENTER_COLORS = ("#E3F2FD", "#F3E5F5", "#E8F5E8", "#FFF3E0", "#FCE4EC", "#F1F8E9")


def center_color(index: int) -> str:
    return CENTER_COLORS[index % len(CENTER_COLORS)]


class LatenessClass(str, Enum):
    """Deadline classification of an order relative to today."""

    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    UPCOMING_WITHIN_7_DAYS = "upcoming_within_7_days"
    SCHEDULED_LATER = "scheduled_later"
    NO_DEADLINE = "no_deadline"
    COMPLETED = "completed"
