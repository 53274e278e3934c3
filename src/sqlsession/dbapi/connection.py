"""Connection adapter over a DB-API 2.0 driver connection."""

import importlib
import sys
from collections.abc import Sequence
from types import ModuleType
from typing import Any

from loguru import logger

from sqlsession.config.models import DataSourceConfig
from sqlsession.dbapi.statement import CallableStatement, Statement
from sqlsession.errors import (
    CommitError,
    ConfigurationError,
    ExecutionError,
    PreparationError,
    RollbackError,
    TransactionError,
)


def _driver_module(underlying: Any) -> ModuleType | None:
    top = type(underlying).__module__.split(".")[0]
    module = sys.modules.get(top)
    if module is None:
        try:
            module = importlib.import_module(top)
        except ImportError:
            return None
    return module


class Connection:
    """
    Live database connection implementing ConnectionPort.

    Owns the driver connection: close() releases it exactly once.
    The driver identity defaults to the top-level module name of the
    driver's connection class (``sqlite3``, ``psycopg2``, ``oracledb``).
    """

    def __init__(
        self,
        underlying: Any,
        driver_name: str | None = None,
        autocommit: bool | None = None,
        module: ModuleType | None = None,
    ) -> None:
        self.underlying = underlying
        self._module = module if module is not None else _driver_module(underlying)
        self._driver_name = driver_name or type(underlying).__module__.split(".")[0]
        self._closed = False

        driver_error = getattr(self._module, "Error", None)
        if isinstance(driver_error, type) and issubclass(driver_error, BaseException):
            self.error_types: tuple[type[BaseException], ...] = (driver_error,)
        else:
            self.error_types = (Exception,)

        if autocommit is not None:
            self._apply_autocommit(autocommit)

    @classmethod
    def open(cls, config: DataSourceConfig) -> "Connection":
        """
        Connect through the DB-API module named in the configuration.

        Raises:
            ConfigurationError: If the driver module cannot be imported
                or does not look like a DB-API module.
            ExecutionError: If the driver fails to connect.
        """
        try:
            module = importlib.import_module(config.driver)
        except ImportError as e:
            raise ConfigurationError(f"Cannot import driver {config.driver!r}: {e}") from e
        if not callable(getattr(module, "connect", None)):
            raise ConfigurationError(f"Driver {config.driver!r} has no connect() function")

        args = [config.database] if config.database is not None else []
        error_types = (module.Error,) if isinstance(getattr(module, "Error", None), type) else (Exception,)
        try:
            raw = module.connect(*args, **config.connect_args)
        except error_types as e:
            raise ExecutionError(f"Connect failed: {e}") from e

        logger.debug("Connected with driver {}", config.driver)
        return cls(
            raw,
            driver_name=config.driver_name or config.driver.split(".")[0],
            autocommit=config.autocommit,
            module=module,
        )

    def _apply_autocommit(self, enabled: bool) -> None:
        current = getattr(self.underlying, "autocommit", None)
        if isinstance(current, bool):
            self.underlying.autocommit = enabled
        elif hasattr(self.underlying, "isolation_level"):
            # sqlite3 legacy transaction control: None means autocommit.
            self.underlying.isolation_level = None if enabled else ""
        elif enabled:
            raise ConfigurationError(f"Driver {self._driver_name} has no autocommit switch")

    @property
    def driver_name(self) -> str:
        return self._driver_name

    @property
    def paramstyle(self) -> str:
        return getattr(self._module, "paramstyle", "qmark")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def autocommit(self) -> bool:
        current = getattr(self.underlying, "autocommit", None)
        if isinstance(current, bool):
            return current
        if hasattr(self.underlying, "isolation_level"):
            return self.underlying.isolation_level is None
        return False

    def _new_cursor(self, sql: str) -> Any:
        if self._closed:
            raise PreparationError("Connection is closed", sql=sql)
        try:
            return self.underlying.cursor()
        except self.error_types as e:
            raise PreparationError(f"Cannot open cursor: {e}", sql=sql) from e

    def prepare(self, sql: str) -> Statement:
        return Statement(self, sql, self._new_cursor(sql))

    def prepare_with_generated_keys(
        self, sql: str, key_columns: Sequence[str] | None
    ) -> Statement:
        if key_columns is not None and not key_columns:
            raise PreparationError(
                f"Driver {self._driver_name} needs key-column names to return generated keys",
                sql=sql,
            )
        return Statement(self, sql, self._new_cursor(sql), return_keys=True, key_columns=key_columns)

    def prepare_callable(self, sql: str) -> CallableStatement:
        return CallableStatement(self, sql, self._new_cursor(sql))

    def begin(self) -> None:
        """
        Start a transaction.

        Drivers exposing ``in_transaction`` (sqlite3) get an explicit
        BEGIN; other drivers open transactions implicitly on the first
        statement.
        """
        if self.autocommit:
            return
        if getattr(self.underlying, "in_transaction", None) is not False:
            return
        try:
            cursor = self.underlying.cursor()
            try:
                cursor.execute("BEGIN")
            finally:
                cursor.close()
        except self.error_types as e:
            raise TransactionError(f"Begin failed: {e}") from e
        logger.debug("Transaction started")

    def commit(self) -> None:
        try:
            self.underlying.commit()
        except self.error_types as e:
            raise CommitError(f"Commit failed: {e}") from e

    def rollback(self) -> None:
        try:
            self.underlying.rollback()
        except self.error_types as e:
            raise RollbackError(f"Rollback failed: {e}") from e

    def close(self) -> None:
        """Close the driver connection. Later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        self.underlying.close()
        logger.debug("Connection closed ({})", self._driver_name)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"Connection(driver={self._driver_name!r}, {state})"
