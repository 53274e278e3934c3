"""Port interfaces for the database driver collaborators.

Session code depends only on these protocols. ``sqlsession.dbapi``
implements them over any DB-API 2.0 driver; tests implement them
with in-memory fakes.
"""

from collections.abc import Sequence
from typing import Any, Protocol


class CursorPort(Protocol):
    """Forward-only cursor over one result set."""

    @property
    def columns(self) -> list[str]:
        """Column labels of the result set."""
        ...

    @property
    def closed(self) -> bool:
        """Whether the cursor has been closed."""
        ...

    @property
    def position(self) -> int:
        """One-based index of the current row, 0 before the first advance."""
        ...

    def next(self) -> bool:
        """Advance to the next row.

        Returns:
            False once the result set is exhausted.
        """
        ...

    def get(self, column: int | str) -> Any:
        """Read a value of the current row by 1-based position or label."""
        ...

    def was_null(self) -> bool:
        """Whether the last value read was SQL NULL."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


class StatementPort(Protocol):
    """A prepared statement bound to one SQL text."""

    sql: str

    def bind_parameters(self, params: Sequence[Any]) -> None:
        """Bind parameter values in declared order."""
        ...

    def execute_query(self) -> CursorPort:
        """Execute as a query and return its cursor."""
        ...

    def execute_update(self) -> int:
        """Execute as a command and return the affected row count."""
        ...

    def execute(self) -> bool:
        """Execute and report whether a result set was produced."""
        ...

    def generated_keys(self) -> CursorPort:
        """Cursor over the keys generated by the last execution."""
        ...

    def result_set(self) -> CursorPort:
        """Cursor over the current result set."""
        ...

    def more_results(self) -> bool:
        """Advance to the next result set, if any."""
        ...

    def close(self) -> None:
        """Release the statement."""
        ...


class ConnectionPort(Protocol):
    """A live database connection."""

    @property
    def driver_name(self) -> str:
        """Identity of the driver behind this connection."""
        ...

    @property
    def autocommit(self) -> bool:
        """Whether every statement commits on its own."""
        ...

    def prepare(self, sql: str) -> StatementPort:
        """Prepare a statement without key retrieval."""
        ...

    def prepare_with_generated_keys(
        self, sql: str, key_columns: Sequence[str] | None
    ) -> StatementPort:
        """Prepare a statement that returns generated keys.

        Args:
            sql: Clean SQL text.
            key_columns: Explicit key-column names, or None for the
                driver's generic "return all generated keys" mode.
        """
        ...

    def prepare_callable(self, sql: str) -> StatementPort:
        """Prepare a stored-procedure call."""
        ...

    def begin(self) -> None:
        """Start a transaction."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def rollback(self) -> None:
        """Roll back the current transaction."""
        ...

    def close(self) -> None:
        """Release the connection."""
        ...
