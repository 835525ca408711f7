"""Wall-clock abstraction.

All timestamps in the service are naive datetimes expressed in UTC. Route
handlers receive a clock through the ``get_clock`` dependency so the period
resolver never reads the system time directly.
"""

from datetime import datetime, timezone
from typing import Protocol


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    def now(self) -> datetime:
        return utcnow()


class FixedClock:
    """Clock frozen at a given instant."""

    def __init__(self, now: datetime):
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc).replace(tzinfo=None)
        self._now = now

    def now(self) -> datetime:
        return self._now


_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock
