"""Logging setup for sqlsession on top of loguru.

Statement execution is logged at DEBUG with the SQL text bound as
``extra["sql"]``; ``LoggingConfig.log_statements`` turns those
records off without silencing the rest. DB-API drivers that log
through the stdlib ``logging`` module are forwarded into the same
sinks, tagged with ``extra["driver"]``.
"""

import logging
import sys
from collections.abc import Callable
from typing import Any

from loguru import logger

from sqlsession.config.models import LoggingConfig

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _DriverLogHandler(logging.Handler):
    """Forward stdlib log records from database drivers into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Attribute the message to the driver's frame, not logging's
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.bind(driver=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _statement_filter(config: LoggingConfig) -> Callable[[dict[str, Any]], bool]:
    def keep(record: dict[str, Any]) -> bool:
        return config.log_statements or "sql" not in record["extra"]

    return keep


def configure_logging(config: LoggingConfig) -> list[int]:
    """
    Replace loguru's sinks according to configuration.

    Console output goes to stderr so query results printed on stdout
    stay parseable. A file sink is added when ``config.file`` is set.

    Args:
        config: LoggingConfig with level, format, file and filtering settings.

    Returns:
        Ids of the loguru sinks that were added.
    """
    logger.remove()

    serialize = config.format == "json"
    options: dict[str, Any] = {
        "format": "{message}" if serialize else _CONSOLE_FORMAT,
        "level": config.level,
        "serialize": serialize,
        "filter": _statement_filter(config),
    }

    sinks = [logger.add(sys.stderr, colorize=not serialize, **options)]
    if config.file is not None:
        sinks.append(
            logger.add(
                config.file,
                rotation=config.rotation,
                retention=config.retention,
                compression="gz",
                **options,
            )
        )

    logging.basicConfig(handlers=[_DriverLogHandler()], level=config.driver_level, force=True)

    logger.debug(
        "Logging configured: level={} format={} statements={}",
        config.level,
        config.format,
        config.log_statements,
    )
    return sinks
