"""Route structlog events and stdlib records through one stderr handler."""

from __future__ import annotations

import logging as std_logging
import sys

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

# Bound by the formatter and the step while they run; rendered ahead of other keys.
CONTEXT_KEYS = ("step", "path")


def _level_from_verbosity(verbosity: int) -> int:
    if verbosity <= 0:
        return std_logging.WARNING
    if verbosity == 1:
        return std_logging.INFO
    return std_logging.DEBUG


def _hoist_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Move step and file context to the front so the console renderer shows them first."""

    hoisted = {key: event_dict.pop(key) for key in CONTEXT_KEYS if key in event_dict}
    if not hoisted:
        return event_dict
    event = event_dict.pop("event", None)
    return {"event": event, **hoisted, **event_dict}


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _hoist_context,
    ]


def configure_logging(json_mode: bool = False, verbosity: int = 0) -> None:
    """Send library events and config warnings to stderr in the chosen format."""

    level = _level_from_verbosity(verbosity)
    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_mode
        else structlog.dev.ConsoleRenderer(sort_keys=False)
    )
    shared = _shared_processors()

    # Formatted source goes to stdout, so every log line goes to stderr.
    handler = std_logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = std_logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
