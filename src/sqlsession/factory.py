"""Session factory.

Replaces a process-wide default data source: whatever needs sessions
is handed a SessionFactory built from explicit configuration.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from loguru import logger

from sqlsession.config.models import Config, DataSourceConfig, SessionConfig
from sqlsession.dbapi.connection import Connection
from sqlsession.policy import GeneratedKeyPolicy
from sqlsession.ports.driver import ConnectionPort
from sqlsession.session import Session


class SessionFactory:
    """Creates sessions, each owning a fresh connection.

    Args:
        config: Root configuration; its datasource and session sections
            are used.
        connect: Optional connection factory replacing the configured
            DB-API driver (e.g. a pool's borrow function).
    """

    def __init__(
        self,
        config: Config | None = None,
        connect: Callable[[], ConnectionPort] | None = None,
    ) -> None:
        self._config = config or Config()
        self._connect = connect
        self._key_policy = GeneratedKeyPolicy.from_config(self._config.session)

    @property
    def datasource(self) -> DataSourceConfig:
        return self._config.datasource

    @property
    def session_config(self) -> SessionConfig:
        return self._config.session

    @property
    def key_policy(self) -> GeneratedKeyPolicy:
        return self._key_policy

    def connect(self) -> ConnectionPort:
        """Open a new connection."""
        if self._connect is not None:
            return self._connect()
        return Connection.open(self.datasource)

    def open(self) -> Session:
        """Open a session; the caller must close it."""
        connection = self.connect()
        logger.debug("Session opened on {}", connection.driver_name)
        return Session(
            connection,
            auto_generated_keys=self.session_config.auto_generated_keys,
            key_policy=self._key_policy,
        )

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Session scoped to a ``with`` block; its connection is closed on exit."""
        session = self.open()
        try:
            yield session
        finally:
            session.close()
