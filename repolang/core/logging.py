"""Logging for the ``repolang`` command line.

The library itself only emits structlog events under the ``repolang.*``
logger names (``ignore.matched``, ``classify.read_failed``, ``analyse.done``
and so on) and leaves handler setup to the application.  The CLI calls
:func:`setup_logging` once, from the group callback, so those events are
rendered on stderr and never mix with the report or ``--json`` on stdout.
"""

from __future__ import annotations

import logging
import logging.config
import os
import sys

import structlog


def setup_logging(level: str | None = None) -> None:
    """Route ``repolang.*`` events through one stderr handler.

    *level* comes from ``-v`` (DEBUG shows every ignore match and dropped
    file); otherwise ``REPOLANG_LOG_LEVEL`` applies (default: INFO).
    ``REPOLANG_LOG_FORMAT=json`` switches to one JSON object per line.
    Other libraries stay at WARNING.
    """
    log_level = (level or os.environ.get("REPOLANG_LOG_LEVEL", "INFO")).upper()
    log_format = os.environ.get("REPOLANG_LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    # structlog events are handed to stdlib logging for rendering
    structlog.configure(
        processors=shared_processors
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # stdlib loggers (httpx included) share the same renderer
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "structlog",
                },
            },
            "root": {
                "handlers": ["default"],
                "level": "WARNING",
            },
            "loggers": {
                "repolang": {"level": log_level},
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
        }
    )
