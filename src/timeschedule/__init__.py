"""timeschedule - in-process time-based callback scheduler.

Usage:
    from timeschedule import TimeSchedule

    schedule = TimeSchedule(poll_interval_ms=1000)

    async def poll_feed(due_time: int) -> int | None:
        await refresh_feed()
        return due_time + 300_000

    async with schedule:
        schedule.set(poll_feed)  # Due on the next tick
        ...
"""

from timeschedule.config import ScheduleConfig, load_config
from timeschedule.scheduling import (
    CallbackExecutionFailure,
    InvalidTimeValue,
    ScheduleEntry,
    ScheduleFunction,
    ScheduleStatus,
    ScheduleTime,
    TimeSchedule,
    TimeScheduleError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CallbackExecutionFailure",
    "InvalidTimeValue",
    "ScheduleConfig",
    "ScheduleEntry",
    "ScheduleFunction",
    "ScheduleStatus",
    "ScheduleTime",
    "TimeSchedule",
    "TimeScheduleError",
    "load_config",
]
