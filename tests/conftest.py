"""Shared pytest fixtures for sqlsession tests.

The fakes implement the driver ports in memory and append every
call to a shared log so tests can assert exact call sequences.
"""

from collections.abc import Sequence
from typing import Any

import pytest

from sqlsession.errors import BindingError, CommitError, ExecutionError, PreparationError


class FakeCursor:
    """CursorPort over a list of row tuples."""

    def __init__(self, rows: Sequence[Sequence[Any]], columns: list[str], log: list[str], name: str) -> None:
        self._rows = list(rows)
        self._columns = columns
        self._log = log
        self._name = name
        self._position = 0
        self._last_was_null = False
        self.advances = 0
        self.closed = False

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def position(self) -> int:
        return self._position

    def next(self) -> bool:
        self.advances += 1
        self._log.append(f"{self._name}.next")
        if self._position >= len(self._rows):
            return False
        self._position += 1
        return True

    def get(self, column: int | str) -> Any:
        index = column - 1 if isinstance(column, int) else self._columns.index(column)
        value = self._rows[self._position - 1][index]
        self._last_was_null = value is None
        return value

    def was_null(self) -> bool:
        return self._last_was_null

    def close(self) -> None:
        self.closed = True
        self._log.append(f"{self._name}.close")


class FakeStatement:
    """StatementPort driven by the owning FakeConnection's script."""

    def __init__(self, connection: "FakeConnection", sql: str) -> None:
        self.sql = sql
        self._connection = connection
        self._log = connection.log
        self.params: tuple[Any, ...] | None = None
        self.closed = False
        self.cursors: list[FakeCursor] = []
        self._result_index = 0

    def _cursor(self, rows: Sequence[Sequence[Any]], columns: list[str], name: str) -> FakeCursor:
        cursor = FakeCursor(rows, columns, self._log, name)
        self.cursors.append(cursor)
        return cursor

    def bind_parameters(self, params: Sequence[Any]) -> None:
        self._log.append("stmt.bind")
        if self._connection.fail_binding:
            raise BindingError("bad parameters", sql=self.sql)
        self.params = tuple(params)

    def execute_query(self) -> FakeCursor:
        self._log.append("stmt.execute_query")
        if self._connection.fail_execution:
            raise ExecutionError("boom", sql=self.sql)
        return self._cursor(self._connection.rows, self._connection.columns, "cursor")

    def execute_update(self) -> int:
        self._log.append("stmt.execute_update")
        if self._connection.fail_execution:
            raise ExecutionError("boom", sql=self.sql)
        return self._connection.update_count

    def execute(self) -> bool:
        self._log.append("stmt.execute")
        if self._connection.fail_execution:
            raise ExecutionError("boom", sql=self.sql)
        if self._connection.result_sets is not None:
            return bool(self._connection.result_sets)
        return self._connection.execute_result

    def generated_keys(self) -> FakeCursor:
        self._log.append("stmt.generated_keys")
        return self._cursor(self._connection.keys, self._connection.key_labels, "keys")

    def result_set(self) -> FakeCursor:
        self._log.append(f"stmt.result_set[{self._result_index}]")
        rows = self._connection.result_sets[self._result_index]
        return self._cursor(rows, ["value"], f"rs{self._result_index}")

    def more_results(self) -> bool:
        self._log.append("stmt.more_results")
        self._result_index += 1
        return self._result_index < len(self._connection.result_sets)

    def close(self) -> None:
        self.closed = True
        self._log.append("stmt.close")


class FakeConnection:
    """ConnectionPort with scripted results and a call log."""

    def __init__(self, driver_name: str = "fakedb", autocommit: bool = False) -> None:
        self.driver_name = driver_name
        self.autocommit = autocommit
        self.log: list[str] = []
        self.statements: list[FakeStatement] = []

        self.rows: list[tuple[Any, ...]] = []
        self.columns: list[str] = []
        self.update_count = 0
        self.execute_result = False
        self.keys: list[tuple[Any, ...]] = []
        self.key_labels: list[str] = ["id"]
        self.result_sets: list[list[tuple[Any, ...]]] | None = None

        self.fail_binding = False
        self.fail_execution = False
        self.fail_prepare = False
        self.fail_commit = False

    def _statement(self, sql: str) -> FakeStatement:
        if self.fail_prepare:
            raise PreparationError("rejected", sql=sql)
        stmt = FakeStatement(self, sql)
        self.statements.append(stmt)
        return stmt

    def prepare(self, sql: str) -> FakeStatement:
        self.log.append("prepare")
        return self._statement(sql)

    def prepare_with_generated_keys(self, sql: str, key_columns: Sequence[str] | None) -> FakeStatement:
        mode = "generic" if key_columns is None else ",".join(key_columns)
        self.log.append(f"prepare_keys[{mode}]")
        return self._statement(sql)

    def prepare_callable(self, sql: str) -> FakeStatement:
        self.log.append("prepare_callable")
        return self._statement(sql)

    def begin(self) -> None:
        self.log.append("begin")

    def commit(self) -> None:
        self.log.append("commit")
        if self.fail_commit:
            raise CommitError("commit refused")

    def rollback(self) -> None:
        self.log.append("rollback")

    def close(self) -> None:
        self.log.append("close")

    @property
    def opened(self) -> int:
        return len(self.statements)

    @property
    def released(self) -> int:
        return sum(1 for stmt in self.statements if stmt.closed)

    def calls(self, *names: str) -> list[str]:
        """Log entries restricted to the given names."""
        return [entry for entry in self.log if entry in names]


@pytest.fixture
def fake_connection() -> FakeConnection:
    """Scripted in-memory connection."""
    return FakeConnection()


@pytest.fixture
def session(fake_connection: FakeConnection):
    """Session over the fake connection."""
    from sqlsession.session import Session

    return Session(fake_connection, auto_generated_keys=["id"])
