"""Time schedule engine — fires callbacks when their times elapse.

The engine owns the pending entries and the callback registry. A recurring
timer on the running asyncio loop spawns a tick every poll interval; each
tick claims the due entries, runs their callbacks concurrently and folds any
returned times back in as new entries.
"""

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any, Self

from timeschedule.config.models import DEFAULT_POLL_INTERVAL_MS, ScheduleConfig
from timeschedule.scheduling.callbacks import adapt_callback
from timeschedule.scheduling.errors import CallbackExecutionFailure
from timeschedule.scheduling.times import normalize_times, now_ms, to_epoch_ms
from timeschedule.scheduling.types import (
    Registration,
    ScheduleEntry,
    ScheduleFunction,
    ScheduleStatus,
    ScheduleTimes,
)

logger = logging.getLogger(__name__)

ErrorHook = Callable[[CallbackExecutionFailure], Any]


def _callback_name(key: Any) -> str:
    return getattr(key, "__qualname__", None) or type(key).__name__


class TimeSchedule:
    """Runs callbacks at absolute times and lets them reschedule themselves.

    A callback receives the time it was scheduled for (epoch ms) and returns
    the next time it should run, or None to stop. Plain functions and
    coroutine functions are both accepted.

    Example:
        schedule = TimeSchedule(poll_interval_ms=1000)

        def report(due_time: int) -> int | None:
            send_report()
            return due_time + 60_000  # Again in a minute

        async with schedule:
            schedule.set(report, "2026-01-12T09:00:00+00:00")
            await serve_forever()

    The owner of ``start()`` is responsible for calling ``stop()``; use the
    engine as an async context manager to guarantee it.
    """

    def __init__(
        self,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        *,
        clock: Callable[[], int] | None = None,
        on_error: ErrorHook | None = None,
    ):
        self._config = ScheduleConfig(poll_interval_ms=poll_interval_ms)
        self._clock = clock or now_ms
        self._on_error = on_error
        self._entries: list[ScheduleEntry] = []
        self._registrations: dict[Any, Registration] = {}
        self._timer: asyncio.TimerHandle | None = None
        self._next_deadline = 0.0
        self._ticks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_config(cls, config: ScheduleConfig, **kwargs: Any) -> Self:
        return cls(config.poll_interval_ms, **kwargs)

    @property
    def poll_interval_ms(self) -> int:
        return self._config.poll_interval_ms

    @property
    def running(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> Callable[[], None]:
        """Start the periodic tick on the running event loop.

        Calling start while already running has no effect.

        Returns:
            A handle that stops the schedule when called.

        Raises:
            RuntimeError: If no event loop is running.
        """
        if self._timer is None:
            loop = asyncio.get_running_loop()
            self._next_deadline = loop.time() + self._config.poll_interval_seconds
            self._timer = loop.call_at(self._next_deadline, self._on_interval, loop)
            logger.info(
                "time_schedule_started",
                extra={"schedule.poll_interval_ms": self.poll_interval_ms},
            )
        return self.stop

    def stop(self) -> None:
        """Stop the periodic tick. Ticks already in progress run to completion."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        logger.info(
            "time_schedule_stopped",
            extra={"schedule.pending": len(self._entries)},
        )

    async def aclose(self) -> None:
        """Stop the schedule and wait for in-progress ticks to finish."""
        self.stop()
        if self._ticks:
            await asyncio.gather(*self._ticks, return_exceptions=True)

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _on_interval(self, loop: asyncio.AbstractEventLoop) -> None:
        # Fixed-rate: the next tick does not wait for this one to finish
        interval = self._config.poll_interval_seconds
        self._next_deadline += interval
        now = loop.time()
        if self._next_deadline <= now:
            # Loop was stalled; skip missed intervals instead of replaying them
            missed = math.floor((now - self._next_deadline) / interval) + 1
            self._next_deadline += missed * interval
        self._timer = loop.call_at(self._next_deadline, self._on_interval, loop)

        task = loop.create_task(self.tick())
        self._ticks.add(task)
        task.add_done_callback(self._on_tick_done)

    def _on_tick_done(self, task: asyncio.Task[None]) -> None:
        self._ticks.discard(task)
        if task.cancelled():
            return
        if exc := task.exception():
            logger.error(
                "schedule_tick_error",
                extra={"error.message": str(exc)},
                exc_info=exc,
            )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def set(self, callback: ScheduleFunction, times: ScheduleTimes = None) -> None:
        """Schedule ``callback`` at one or more times.

        Does nothing if ``callback`` is already registered; use ``update``
        to replace an existing schedule.

        Args:
            callback: Plain or coroutine function taking the due time (epoch ms).
            times: Epoch ms, ISO-8601 string, date/datetime, or an iterable of
                those. Omitted means now (due on the next tick).

        Raises:
            InvalidTimeValue: If any time cannot be normalized. Nothing is
                registered in that case.
        """
        if callback in self._registrations:
            return
        self._register(callback, normalize_times(times, self._clock()))

    def remove(self, callback: ScheduleFunction) -> None:
        """Remove ``callback`` and all of its pending times."""
        if self._registrations.pop(callback, None) is None:
            return
        self._entries = [e for e in self._entries if e.key != callback]
        logger.debug(f"Removed schedule for {_callback_name(callback)}")

    def update(self, callback: ScheduleFunction, times: ScheduleTimes) -> None:
        """Replace the schedule of ``callback``, registering it if needed.

        Raises:
            InvalidTimeValue: If any time cannot be normalized. The previous
                schedule is left untouched in that case.
        """
        due_times = normalize_times(times, self._clock())
        self.remove(callback)
        self._register(callback, due_times)

    def _register(self, callback: ScheduleFunction, due_times: list[int]) -> None:
        if not due_times:
            return
        self._registrations[callback] = Registration(
            callback=adapt_callback(callback)
        )
        self._entries.extend(ScheduleEntry(due_time=t, key=callback) for t in due_times)
        logger.debug(
            f"Scheduled {_callback_name(callback)} at {len(due_times)} time(s), "
            f"first={min(due_times)}"
        )

    def status(self) -> ScheduleStatus:
        """Get running state and pending entries ordered by due time."""
        return ScheduleStatus(
            running=self.running,
            entries=tuple(sorted(self._entries, key=lambda e: e.due_time)),
        )

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    async def tick(self) -> None:
        """Fire every due entry once and fold the results back in."""
        if not self._entries:
            return

        now = self._clock()
        due: list[ScheduleEntry] = []
        remaining: list[ScheduleEntry] = []
        for entry in self._entries:
            (due if entry.due_time <= now else remaining).append(entry)
        if not due:
            return

        # Claim due entries before any callback runs so overlapping ticks
        # never fire the same entry twice.
        self._entries = remaining
        claimed: list[tuple[ScheduleEntry, Registration]] = []
        for entry in due:
            registration = self._registrations.get(entry.key)
            if registration is None:
                continue
            registration.in_flight += 1
            claimed.append((entry, registration))

        logger.debug(
            f"Schedule tick: {len(due)} due, {len(remaining)} remaining (now={now})"
        )

        # Stays all-None if the tick itself is cancelled; claimed entries then end
        results: list[int | None] = [None] * len(claimed)
        try:
            results = await asyncio.gather(
                *(self._fire(entry, registration) for entry, registration in claimed)
            )
        finally:
            for _, registration in claimed:
                registration.in_flight -= 1
            self._fold(claimed, results)

    async def _fire(self, entry: ScheduleEntry, registration: Registration) -> int | None:
        """Run one callback; failures are reported and end the entry."""
        try:
            result = await registration.callback(entry.due_time)
            if result is None:
                return None
            return to_epoch_ms(result)
        except asyncio.CancelledError as e:
            # A callback awaiting a cancelled task fails like any other error,
            # but cancellation of the tick itself must propagate.
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            self._report(CallbackExecutionFailure(entry.key, entry.due_time, e))
            return None
        except Exception as e:
            self._report(CallbackExecutionFailure(entry.key, entry.due_time, e))
            return None

    def _fold(
        self,
        claimed: list[tuple[ScheduleEntry, Registration]],
        results: list[int | None],
    ) -> None:
        rescheduled = [
            ScheduleEntry(due_time=next_time, key=entry.key)
            for (entry, registration), next_time in zip(claimed, results, strict=True)
            # Dropped if the callback was removed (or replaced) meanwhile
            if next_time is not None
            and self._registrations.get(entry.key) is registration
        ]
        self._entries = rescheduled + self._entries

        live = {entry.key for entry in self._entries}
        self._registrations = {
            key: registration
            for key, registration in self._registrations.items()
            if key in live or registration.in_flight > 0
        }

    def _report(self, failure: CallbackExecutionFailure) -> None:
        if self._on_error is None:
            logger.error(
                "schedule_callback_error",
                extra={
                    "schedule.callback": _callback_name(failure.key),
                    "schedule.due_time": failure.due_time,
                    "error.message": str(failure.error),
                },
                exc_info=failure.error,
            )
            return
        try:
            self._on_error(failure)
        except Exception:
            logger.exception("schedule_error_hook_failed")
