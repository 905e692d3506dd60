"""Adapts plain and coroutine callables to one awaitable calling convention.

The engine only ever calls ``await callback(due_time)``; whether the user
supplied a coroutine function or a plain function is decided once, at
registration, by ``adapt_callback``.
"""

import functools
import inspect
from dataclasses import dataclass
from typing import Any

from timeschedule.scheduling.types import ScheduleFunction, ScheduleTime


def is_async_callable(func: Any) -> bool:
    """Check whether calling ``func`` produces a coroutine.

    Looks through ``functools.partial`` wrappers and callable objects
    with an ``async def __call__``.
    """
    while isinstance(func, functools.partial):
        func = func.func
    if inspect.iscoroutinefunction(func):
        return True
    call = getattr(func, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


@dataclass(frozen=True, slots=True)
class DeferredCallback:
    """A coroutine callable, awaited as-is."""

    func: ScheduleFunction

    async def __call__(self, due_time: int) -> ScheduleTime | None:
        return await self.func(due_time)  # type: ignore[misc]


@dataclass(frozen=True, slots=True)
class DirectCallback:
    """A plain callable whose return value is delivered through a coroutine."""

    func: ScheduleFunction

    async def __call__(self, due_time: int) -> ScheduleTime | None:
        result = self.func(due_time)
        # Plain functions may still hand back an awaitable (e.g. a Task)
        if inspect.isawaitable(result):
            result = await result
        return result


AdaptedCallback = DeferredCallback | DirectCallback


def adapt_callback(func: ScheduleFunction) -> AdaptedCallback:
    """Wrap ``func`` so it can always be awaited with a due time."""
    if not callable(func):
        raise TypeError(f"Schedule callback must be callable, got {type(func).__name__}")
    if is_async_callable(func):
        return DeferredCallback(func)
    return DirectCallback(func)
