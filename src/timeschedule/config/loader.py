"""Configuration loading from TOML files and environment variables."""

import os
import tomllib
from pathlib import Path
from typing import Any

from timeschedule.config.models import ScheduleConfig

ENV_PREFIX = "TIMESCHEDULE_"

# TOML table holding scheduler options
SECTION = "schedule"


def _apply_env_overrides(section: dict[str, Any]) -> dict[str, Any]:
    """Override config values from TIMESCHEDULE_* environment variables."""
    for field_name in ScheduleConfig.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value:
            section[field_name] = value
    return section


def load_config(path: Path | None = None) -> ScheduleConfig:
    """Load configuration from a TOML file and the environment.

    Args:
        path: Path to a TOML file with a [schedule] table. If None, only
            defaults and environment variables are used.

    Returns:
        Validated ScheduleConfig instance.

    Raises:
        FileNotFoundError: If an explicit config file does not exist.
        pydantic.ValidationError: If a value is invalid.
    """
    section: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with config_path.open("rb") as f:
            raw_config = tomllib.load(f)
        section = dict(raw_config.get(SECTION) or {})

    return ScheduleConfig.model_validate(_apply_env_overrides(section))
