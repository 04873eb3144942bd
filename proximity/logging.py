from __future__ import annotations

import logging
import os

import structlog

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "aiosqlite")


def _get_log_level() -> int:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level, logging.INFO)


def _log_format() -> str:
    # Console output by default in dev unless LOG_FORMAT says otherwise
    if os.getenv("APP_ENV") == "dev" and "LOG_FORMAT" not in os.environ:
        return "console"
    return os.getenv("LOG_FORMAT", "json").lower()


def setup_logging() -> None:
    """Route structlog and stdlib logging through one JSON (or console) renderer.

    Every line carries an ISO/UTC timestamp, the level, the event name and
    anything bound via contextvars (request_id, path, method).
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if _log_format() == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    logging.basicConfig(level=_get_log_level(), handlers=[handler], force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(_get_log_level(), logging.WARNING))
