"""
Logging Configuration for the E-Commerce Reporting Engine

Structured logging through structlog, rendered by the stdlib logging
machinery so that library records (SQLAlchemy, asyncio) share one format.

Report computations bind their report name with ``report_context`` so that
every event logged while a report runs carries it, including events from
worker threads of ``ReportEngine.compute_all``.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from ecommerce_reports.config.settings import get_settings

# Library loggers and the level they are held at unless SQL echo is on
QUIET_LOGGERS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "asyncio": logging.WARNING,
}


def _shared_processors() -> List:
    """Processors applied to structlog events and to foreign stdlib records"""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for the reporting engine.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override output format ("json" or "text")
    """
    settings = get_settings()
    level = (log_level or settings.monitoring.log_level).upper()
    log_format = log_format or settings.monitoring.log_format
    numeric_level = getattr(logging, level, None)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    shared = _shared_processors()
    structlog.configure(
        processors=shared + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(processor=_renderer(log_format), foreign_pre_chain=shared))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name, quiet_level in QUIET_LOGGERS.items():
        if settings.database.echo and name.startswith("sqlalchemy"):
            logging.getLogger(name).setLevel(logging.INFO)
        else:
            logging.getLogger(name).setLevel(max(quiet_level, numeric_level))

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=logging.getLevelName(numeric_level),
        format=log_format,
        environment=settings.app_env,
    )


@contextmanager
def report_context(**values) -> Iterator[None]:
    """
    Bind key-value pairs to every event logged inside the block.

    Example:
        with report_context(report="top_products"):
            logger.info("Report computed", rows=10)
    """
    with structlog.contextvars.bound_contextvars(**values):
        yield


def get_logger(name: str):
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)
