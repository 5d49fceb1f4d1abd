"""Structured logging for registro_formazione, built on structlog.

Console output for interactive use, JSON lines when LOG_JSON is set. Both go
to stderr: stdout belongs to the ``schema`` command's JSON.
"""

import logging
import sys
from typing import Any, Optional, TextIO

import structlog

# Chatty at INFO; only their warnings matter here
_QUIET_LOGGERS = ("urllib3", "charset_normalizer")


def setup_logging(
    json_output: bool = False,
    log_level: str = "INFO",
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structlog and route stdlib logging to the same stream.

    Args:
        json_output: Emit JSON lines instead of the console renderer.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Unknown names
            fall back to INFO.
        stream: Destination for every log line, stderr by default.
    """
    stream = stream or sys.stderr
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
        # Italian labels (Mercoledì, ATTIVITÀ) stay readable
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(stream)]
    root.setLevel(numeric_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


def bind_course_context(**values: Any) -> None:
    """Tag every following event with the course being generated.

    Replaces any previous course context. Empty values are left out.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in values.items() if value}
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger bound with the calling module's name."""
    return structlog.get_logger(name)
