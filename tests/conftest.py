"""Shared test fixtures and factories."""

import pytest

from timeschedule import CallbackExecutionFailure, TimeSchedule

POLL_INTERVAL_MS = 1_000

# 2026-01-01T00:00:00Z
START_TIME_MS = 1_767_225_600_000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_TIME_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now


class SimulatedTimer:
    """Drives a TimeSchedule the way its interval timer would, on fake time.

    A tick runs each time a full poll interval has elapsed, and is awaited
    to completion before time moves on.
    """

    def __init__(self, schedule: TimeSchedule, clock: FakeClock):
        self._schedule = schedule
        self._clock = clock
        self._since_tick = 0

    async def advance(self, ms: int) -> None:
        interval = self._schedule.poll_interval_ms
        remaining = ms
        while remaining > 0:
            step = min(remaining, interval - self._since_tick)
            self._clock.now += step
            self._since_tick += step
            remaining -= step
            if self._since_tick == interval:
                self._since_tick = 0
                await self._schedule.tick()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def failures() -> list[CallbackExecutionFailure]:
    return []


@pytest.fixture
def schedule(
    clock: FakeClock, failures: list[CallbackExecutionFailure]
) -> TimeSchedule:
    """Schedule on a fake clock that records callback failures."""
    return TimeSchedule(POLL_INTERVAL_MS, clock=clock, on_error=failures.append)


@pytest.fixture
def timer(schedule: TimeSchedule, clock: FakeClock) -> SimulatedTimer:
    return SimulatedTimer(schedule, clock)
