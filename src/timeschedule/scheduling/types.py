"""Schedule types.

Public types:
- ScheduleEntry: One pending firing of a callback
- ScheduleStatus: Snapshot returned by TimeSchedule.status()
- ScheduleTime: Accepted time values (epoch ms, ISO-8601 string, date/datetime)
- ScheduleFunction: Signature of a schedulable callable
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

ScheduleTime = int | float | str | datetime | date

# One value or many; None means "now"
ScheduleTimes = ScheduleTime | Iterable[ScheduleTime] | None

# Receives the scheduled due time (epoch ms), returns the next time or None
ScheduleFunction = Callable[[int], ScheduleTime | Awaitable[ScheduleTime | None] | None]

AdaptedFunction = Callable[[int], Awaitable[ScheduleTime | None]]


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    """A pending firing: the callback keyed by ``key`` is due at ``due_time``."""

    due_time: int  # Epoch milliseconds
    key: Any


@dataclass(slots=True, eq=False)
class Registration:
    """Adapted form of a registered callable.

    Compared by identity so a result folded back after remove-then-set
    never attaches to the newer registration.
    """

    callback: AdaptedFunction
    in_flight: int = 0  # Entries claimed by a tick but not yet folded


@dataclass(frozen=True, slots=True)
class ScheduleStatus:
    """Point-in-time view of a TimeSchedule."""

    running: bool
    entries: tuple[ScheduleEntry, ...] = ()

    @property
    def pending(self) -> int:
        return len(self.entries)
