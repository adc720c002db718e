"""Injectable wall-clock used for close timestamps and lateness checks."""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: current time in UTC."""
    return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant, advanced manually.

    Used by tests and by batch replays that must stamp deterministic times.
    """

    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def __call__(self) -> datetime:
        return self.instant

    def advance(self, **delta: float) -> None:
        self.instant = self.instant + timedelta(**delta)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
