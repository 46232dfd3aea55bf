"""structlog setup and default log sinks.

When a RetryExecutor has no log or trace sink of its own, messages go to
the process diagnostic log through the functions below. They write one
structlog event per message, so the destination and renderer follow
whatever configure_logging() installed (stderr, console renderer by
default).
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Sequence

import structlog

from riskycall.core.config import LoggingConfig, get_settings

_sink_log = structlog.get_logger("riskycall")


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    """Configure structlog from a LoggingConfig.

    Args:
        config: Logging section to apply. Defaults to the global settings.
    """
    cfg = config or get_settings().logging

    if cfg.format == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    stream = sys.stdout if cfg.output == "stdout" else sys.stderr

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(cfg.level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )


def default_log_sink(*messages: str) -> None:
    """Write each message as its own warning event."""
    for message in messages:
        _sink_log.warning(message)


def default_trace_sink(frames: Sequence[str], executor: Any = None) -> None:
    """Write the whole trace as a single newline-joined event."""
    _sink_log.warning("\n".join(frames))
