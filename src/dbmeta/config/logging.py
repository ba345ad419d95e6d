"""structlog setup shared by every dbmeta command.

All log output goes to stderr so stdout only ever carries the rendered
result. structlog events and plain stdlib records (the catalog reader,
SQLAlchemy, firebird-driver) pass through the same formatter, rendered
either for a terminal or as JSON lines (``--log-json``).
"""

from __future__ import annotations

import logging
import sys

import structlog

# Chatty at INFO/DEBUG; kept at WARNING even with --verbose.
LIBRARY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "firebird.driver")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _stderr_handler(log_json: bool) -> logging.Handler:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging to one stderr handler.

    ``dbmeta.*`` loggers log at DEBUG with *verbose*, WARNING otherwise.
    Calling this again replaces the handler rather than adding one.
    """
    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(_stderr_handler(log_json))
    root.setLevel(logging.WARNING)

    logging.getLogger("dbmeta").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
