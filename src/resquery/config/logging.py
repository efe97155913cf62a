"""structlog configuration for resquery.

All log output goes to stderr so stdout stays reserved for results
(``--json`` output must remain parseable):

- console (default): colored key/value lines
- JSON (``--log-json``): one JSON object per line, non-ASCII kept as is

stdlib loggers (the parser, resolver and repositories log through
``logging.getLogger(__name__)``) share the structlog processor chain, so
their records carry the same fields, including the ``command`` bound by
:class:`resquery.commands._base.ResCommand`.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Third-party loggers held at WARNING unless asked for explicitly.
_LIBRARY_LOGGERS = ("sqlalchemy",)
_SQL_LOGGER = "sqlalchemy.engine"


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    sql_echo: bool = False,
) -> None:
    """Configure structlog processors and output routing.

    Safe to call repeatedly; the root logger always ends up with exactly
    one stderr handler.

    Args:
        verbose: ``resquery`` loggers at DEBUG instead of WARNING.
        log_json: Use the JSON renderer instead of the console renderer.
        sql_echo: Log SQL statements (``sqlalchemy.engine`` at INFO).
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("resquery").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(_SQL_LOGGER).setLevel(logging.INFO if sql_echo else logging.NOTSET)
