"""Logging for the engine: structlog events and stdlib records, one stream.

Lifecycle code (initialization, migrations, schema reset) emits structlog
events; the store and gamification services log through
``logging.getLogger(__name__)``. Both are rendered by the same
``ProcessorFormatter`` on a handler owned by the ``stemlearn`` logger, so an
embedding app's root logging configuration is left alone.
"""

import logging

import structlog

from stemlearn.config import Settings

PACKAGE_LOGGER = "stemlearn"


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def setup_logging(settings: Settings) -> logging.Handler:
    """Install the package handler and configure structlog. Safe to call again."""
    if settings.log_format == "json":
        final: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[*_shared_processors(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        # module-level loggers exist before create_app runs
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_shared_processors(),
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *final],
        )
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.handlers = [handler]
    package_logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    package_logger.propagate = False

    # SQL echo stays off unless explicitly debugging
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    return handler
