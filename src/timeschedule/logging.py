"""Centralized logging configuration for timeschedule.

The library only creates module-level loggers; applications embedding a
TimeSchedule call configure_logging() once at startup if they want output.

Logging Levels:
- DEBUG: Per-tick summaries, registrations and removals
- INFO: Schedule started/stopped
- ERROR: Callback failures and unexpected tick failures

Structured fields are passed via ``extra`` using dotted names
(``schedule.callback``, ``schedule.due_time``, ``error.message``).
"""

import logging
import os

ENV_VAR = "TIMESCHEDULE_LOG_LEVEL"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ComponentFormatter(logging.Formatter):
    """Formatter that extracts component name from logger path.

    Converts full module paths to short component names:
    - timeschedule.scheduling.engine -> scheduling
    - timeschedule.config.loader -> config
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = record.name.split(".")
        if len(parts) >= 2 and parts[0] == "timeschedule":
            record.component = parts[1]
        else:
            record.component = parts[0]
        return super().format(record)


def resolve_level(level: str | None = None) -> int:
    """Resolve a level name, falling back to TIMESCHEDULE_LOG_LEVEL, then INFO."""
    if level is None:
        level = os.environ.get(ENV_VAR, "INFO")
    level = level.upper()
    if level not in LOG_LEVELS:
        level = "INFO"
    return getattr(logging, level)


def configure_logging(level: str | None = None, use_rich: bool = False) -> None:
    """Configure logging for applications using timeschedule.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
            If None, uses TIMESCHEDULE_LOG_LEVEL env var or INFO.
        use_rich: Use Rich handler for colorful console output.
    """
    log_level = resolve_level(level)

    console_handler: logging.Handler
    if use_rich:
        from rich.logging import RichHandler

        console_handler = RichHandler(
            rich_tracebacks=False,
            show_path=False,
            show_time=True,
            markup=False,
        )
        console_handler.setFormatter(ComponentFormatter("%(component)s | %(message)s"))
    else:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(
            ComponentFormatter(
                "%(asctime)s | %(levelname)-8s | %(component)s | %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    logging.basicConfig(
        level=log_level,
        handlers=[console_handler],
        force=True,
    )
