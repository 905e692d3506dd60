"""Configuration module."""

from timeschedule.config.loader import load_config
from timeschedule.config.models import DEFAULT_POLL_INTERVAL_MS, ScheduleConfig

__all__ = [
    "DEFAULT_POLL_INTERVAL_MS",
    "ScheduleConfig",
    "load_config",
]
