"""Structured logging setup.

Modules log through ``structlog.get_logger(__name__)`` with key/value
context (``unit_id``, ``patient_id``, ``status``). Applications call
``configure_logging`` once at startup; without it structlog's defaults print
readable lines to stdout.
"""

import logging

import structlog


def configure_logging(level: str | int = "INFO", *, json: bool = False) -> None:
    """Configure structlog for the engine.

    Args:
        level: Minimum level name or number, e.g. ``"DEBUG"``.
        json: Render one JSON object per line instead of console output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            msg = "Unknown log level"
            raise ValueError(msg)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
