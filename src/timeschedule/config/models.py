"""Configuration models using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_POLL_INTERVAL_MS = 1_000


class ScheduleConfig(BaseModel):
    """Configuration for a TimeSchedule.

    The poll interval is fixed for the lifetime of an engine; a due entry
    fires at most one interval after its time elapses.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000
