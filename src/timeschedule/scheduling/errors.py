"""Scheduling errors."""

from typing import Any


class TimeScheduleError(Exception):
    """Base class for scheduling errors."""


class InvalidTimeValue(TimeScheduleError, ValueError):
    """A supplied time cannot be converted to epoch milliseconds."""

    def __init__(self, value: Any, reason: str | None = None):
        self.value = value
        message = f"Invalid schedule time: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class CallbackExecutionFailure(TimeScheduleError):
    """A registered callback raised, or returned an unusable time, during a tick.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, key: Any, due_time: int, error: BaseException):
        self.key = key
        self.due_time = due_time
        self.error = error
        name = getattr(key, "__qualname__", None) or repr(key)
        super().__init__(f"Callback {name} failed for due time {due_time}: {error}")
        self.__cause__ = error
