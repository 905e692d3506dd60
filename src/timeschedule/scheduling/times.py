"""Conversion of schedule times to epoch milliseconds.

Accepted values:
- int: epoch milliseconds, used as-is
- float: epoch milliseconds, truncated
- str: ISO-8601 date or date-time
- datetime: naive values are interpreted in local time
- date: midnight UTC

Date-only strings are read as midnight UTC and date-times without an offset
as local time.
"""

import math
import time
from collections.abc import Iterable
from datetime import UTC, date, datetime, timedelta

from timeschedule.scheduling.errors import InvalidTimeValue
from timeschedule.scheduling.types import ScheduleTime, ScheduleTimes

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)

# Types treated as a single value even though str is iterable
_SCALAR_TYPES = (int, float, str, bytes, date)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def _datetime_to_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.astimezone()  # Local time
    return (value - _EPOCH) // _ONE_MS


def _parse_iso(value: str) -> int:
    text = value.strip()
    if not text:
        raise InvalidTimeValue(value, "empty string")
    try:
        day = date.fromisoformat(text)
    except ValueError:
        pass
    else:
        return _datetime_to_ms(datetime(day.year, day.month, day.day, tzinfo=UTC))

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise InvalidTimeValue(value, str(e)) from e
    return _datetime_to_ms(parsed)


def to_epoch_ms(value: ScheduleTime) -> int:
    """Normalize a schedule time to epoch milliseconds.

    Raises:
        InvalidTimeValue: If the value has an unsupported type or cannot be parsed.
    """
    # bool is an int subclass but never a meaningful timestamp
    if isinstance(value, bool):
        raise InvalidTimeValue(value, "bool is not a timestamp")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidTimeValue(value, "not a finite number")
        return int(value)
    if isinstance(value, str):
        return _parse_iso(value)
    if isinstance(value, datetime):
        return _datetime_to_ms(value)
    if isinstance(value, date):
        return _datetime_to_ms(datetime(value.year, value.month, value.day, tzinfo=UTC))
    raise InvalidTimeValue(value, f"unsupported type {type(value).__name__}")


def normalize_times(times: ScheduleTimes, now: int) -> list[int]:
    """Normalize one time, an iterable of times, or None (meaning ``now``).

    Every value is converted before anything is returned, so a single bad
    value fails the whole call.
    """
    if times is None:
        return [now]
    if isinstance(times, _SCALAR_TYPES):
        return [to_epoch_ms(times)]
    if isinstance(times, Iterable):
        return [to_epoch_ms(t) for t in times]
    return [to_epoch_ms(times)]
