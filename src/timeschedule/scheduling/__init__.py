"""Scheduling subsystem — time-based callback execution.

Public API:
- TimeSchedule: Engine that fires callbacks when their times elapse

Callback adaptation:
- adapt_callback: Wrap plain or coroutine callables for uniform awaiting
- is_async_callable: Capability test for coroutine callables

Types:
- ScheduleEntry: One pending (due time, callback) pair
- ScheduleStatus: Snapshot from TimeSchedule.status()
- ScheduleFunction: Callback signature
- ScheduleTime: Accepted time values
"""

from timeschedule.scheduling.callbacks import (
    DeferredCallback,
    DirectCallback,
    adapt_callback,
    is_async_callable,
)
from timeschedule.scheduling.engine import TimeSchedule
from timeschedule.scheduling.errors import (
    CallbackExecutionFailure,
    InvalidTimeValue,
    TimeScheduleError,
)
from timeschedule.scheduling.times import normalize_times, now_ms, to_epoch_ms
from timeschedule.scheduling.types import (
    ScheduleEntry,
    ScheduleFunction,
    ScheduleStatus,
    ScheduleTime,
    ScheduleTimes,
)

__all__ = [
    "CallbackExecutionFailure",
    "DeferredCallback",
    "DirectCallback",
    "InvalidTimeValue",
    "ScheduleEntry",
    "ScheduleFunction",
    "ScheduleStatus",
    "ScheduleTime",
    "ScheduleTimes",
    "TimeSchedule",
    "TimeScheduleError",
    "adapt_callback",
    "is_async_callable",
    "normalize_times",
    "now_ms",
    "to_epoch_ms",
]
