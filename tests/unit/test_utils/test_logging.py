"""Tests for logging configuration."""

import io
import logging
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
from loguru import logger

from sqlsession.config.models import LoggingConfig
from sqlsession.utils.logging import configure_logging


@pytest.fixture(autouse=True)
def restore_logger() -> Generator[None, None, None]:
    """Reset loguru and stdlib logging after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr)
    logging.basicConfig(handlers=[logging.StreamHandler()], level=logging.WARNING, force=True)


def test_stdlib_logging_is_intercepted() -> None:
    """Driver messages logged through stdlib logging reach loguru sinks."""
    configure_logging(LoggingConfig(level="DEBUG"))
    captured = io.StringIO()
    logger.add(captured, format="{level} {message}")

    logging.getLogger("some.driver").warning("connection pool exhausted")

    assert "WARNING connection pool exhausted" in captured.getvalue()


def test_file_sink_created(tmp_path: Path) -> None:
    log_file = tmp_path / "sqlsession.log"

    configure_logging(LoggingConfig(file=log_file))

    assert log_file.exists()


def test_level_filters_console(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="WARNING"))

    logger.info("hidden message")
    logger.warning("shown message")

    err = capsys.readouterr().err
    assert "shown message" in err
    assert "hidden message" not in err


def test_driver_records_tagged_with_logger_name() -> None:
    configure_logging(LoggingConfig(level="DEBUG"))
    captured = io.StringIO()
    logger.add(captured, format="{extra[driver]} {message}")

    logging.getLogger("psycopg.pool").error("pool closed")

    assert "psycopg.pool pool closed" in captured.getvalue()


def test_driver_level_filters_stdlib_records() -> None:
    configure_logging(LoggingConfig(level="DEBUG", driver_level="ERROR"))
    captured = io.StringIO()
    logger.add(captured, format="{message}")

    logging.getLogger("some.driver").warning("below driver level")
    logging.getLogger("some.driver").error("at driver level")

    assert "below driver level" not in captured.getvalue()
    assert "at driver level" in captured.getvalue()


def test_statement_logging_can_be_disabled(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="DEBUG", log_statements=False))

    logger.bind(sql="SELECT 1").debug("Executing: SELECT 1")
    logger.debug("other debug message")

    err = capsys.readouterr().err
    assert "Executing: SELECT 1" not in err
    assert "other debug message" in err


def test_statement_logging_enabled_by_default(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(LoggingConfig(level="DEBUG"))

    logger.bind(sql="SELECT 1").debug("Executing: SELECT 1")

    assert "Executing: SELECT 1" in capsys.readouterr().err


def test_returns_one_sink_per_destination(tmp_path: Path) -> None:
    assert len(configure_logging(LoggingConfig())) == 1
    assert len(configure_logging(LoggingConfig(file=tmp_path / "s.log"))) == 2
