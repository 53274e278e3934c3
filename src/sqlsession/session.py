"""Session and Transaction: resource-scoped SQL execution.

Every public operation acquires its statement (and cursor) for the
duration of the call only and releases them on every exit path,
cursor first, then statement. The connection itself is released
only by Session.close().
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import closing
from typing import Any, TypeVar

from loguru import logger

from sqlsession.errors import TransactionError
from sqlsession.models.query import Query
from sqlsession.policy import GeneratedKeyPolicy
from sqlsession.ports.driver import ConnectionPort, CursorPort, StatementPort
from sqlsession.rows import Row, iter_rows

A = TypeVar("A")
K = TypeVar("K")


class Session:
    """
    Primary entry point owning one database connection.

    Args:
        connection: Connection owned by this session for its lifetime.
        auto_generated_keys: Key-column names, used only for drivers
            whose policy requires explicit key columns.
        key_policy: Driver identity -> key-retrieval mode table.
    """

    def __init__(
        self,
        connection: ConnectionPort,
        auto_generated_keys: Sequence[str] = (),
        key_policy: GeneratedKeyPolicy | None = None,
    ) -> None:
        self.connection = connection
        self.auto_generated_keys = list(auto_generated_keys)
        self.key_policy = key_policy or GeneratedKeyPolicy()
        self._closed = False

    def close(self) -> None:
        """
        Release the owned connection. Later calls are no-ops.

        Outside autocommit mode, work done through the session but not
        inside ``transaction`` is rolled back first; it is never
        committed implicitly.
        """
        if self._closed:
            return
        self._closed = True
        try:
            if not self.connection.autocommit:
                logger.debug("Rolling back uncommitted work on close")
                self.connection.rollback()
        finally:
            self.connection.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Statement preparation
    # =========================================================================

    def prepare(self, query: Query, return_generated_keys: bool = False) -> StatementPort:
        """
        Prepare a statement for a query and bind its parameters.

        Callable queries always use the stored-procedure path. For other
        queries requesting generated keys, drivers whose policy is
        ``columns`` receive the session's key-column names; all others
        use the generic mode.

        Raises:
            PreparationError: Driver rejected the SQL or key mode.
            BindingError: Parameters do not match the statement.
        """
        if query.is_callable:
            stmt = self.connection.prepare_callable(query.statement)
        elif return_generated_keys:
            if self.key_policy.requires_key_columns(self.connection.driver_name):
                stmt = self.connection.prepare_with_generated_keys(
                    query.statement, self.auto_generated_keys
                )
            else:
                stmt = self.connection.prepare_with_generated_keys(query.statement, None)
        else:
            stmt = self.connection.prepare(query.statement)

        try:
            query.populate_params(stmt)
        except Exception:
            stmt.close()
            raise
        logger.bind(sql=query.statement).trace("Prepared: {} keys={}", query.statement, return_generated_keys)
        return stmt

    # =========================================================================
    # Execution shapes
    # =========================================================================

    def query(self, query: Query, consumer: Callable[[CursorPort], A]) -> A:
        """Run a query and hand its cursor to ``consumer``."""
        with closing(self.prepare(query)) as stmt:
            with closing(stmt.execute_query()) as cursor:
                return consumer(cursor)

    def _execute_with(
        self, query: Query, consumer: Callable[[StatementPort], A], keys: bool
    ) -> A | None:
        with closing(self.prepare(query, keys)) as stmt:
            if stmt.execute():
                return consumer(stmt)
            return None

    def _update_with(
        self, query: Query, consumer: Callable[[StatementPort], A], keys: bool
    ) -> A | None:
        with closing(self.prepare(query, keys)) as stmt:
            if stmt.execute_update() > 0:
                return consumer(stmt)
            return None

    def execute_with(self, query: Query, consumer: Callable[[StatementPort], A]) -> A | None:
        """Execute; call ``consumer`` only if a result set was produced."""
        return self._execute_with(query, consumer, keys=False)

    def execute_with_keys(self, query: Query, consumer: Callable[[StatementPort], A]) -> A | None:
        """Like execute_with, with generated-key retrieval requested."""
        return self._execute_with(query, consumer, keys=True)

    def update_with(self, query: Query, consumer: Callable[[StatementPort], A]) -> A | None:
        """Execute an update; call ``consumer`` only if rows were affected."""
        return self._update_with(query, consumer, keys=False)

    def update_with_keys(self, query: Query, consumer: Callable[[StatementPort], A]) -> A | None:
        """Like update_with, with generated-key retrieval requested."""
        return self._update_with(query, consumer, keys=True)

    def execute(self, query: Query) -> bool:
        """Execute; True if a result set was produced."""
        with closing(self.prepare(query)) as stmt:
            return stmt.execute()

    def update(self, query: Query) -> int:
        """Execute an update and return the affected row count."""
        with closing(self.prepare(query)) as stmt:
            return stmt.execute_update()

    # =========================================================================
    # Row mapping
    # =========================================================================

    def list(self, query: Query, extractor: Callable[[Row], A]) -> list[A]:
        """One extracted value per row, in cursor order."""
        return self.query(query, lambda cursor: [extractor(row) for row in iter_rows(cursor)])

    def json_array(
        self, query: Query, extractor: Callable[[Row], dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """One JSON object per row, in cursor order."""
        return self.list(query, extractor)

    def count(self, query: Query) -> int:
        """Number of rows, without materializing them."""

        def count_rows(cursor: CursorPort) -> int:
            rows = 0
            while cursor.next():
                rows += 1
            return rows

        return self.query(query, count_rows)

    def first(self, query: Query, extractor: Callable[[Row], A]) -> A | None:
        """Extracted first row, or None; advances the cursor at most once."""

        def first_row(cursor: CursorPort) -> A | None:
            if cursor.next():
                return extractor(Row(cursor))
            return None

        return self.query(query, first_row)

    def hash_map(
        self,
        query: Query,
        key_extractor: Callable[[Row], K],
        extractor: Callable[[Row], A],
    ) -> dict[K, A]:
        """Key -> value per row; the last row wins for duplicate keys."""

        def collect(cursor: CursorPort) -> dict[K, A]:
            result: dict[K, A] = {}
            for row in iter_rows(cursor):
                value = extractor(row)
                result[key_extractor(row)] = value
            return result

        return self.query(query, collect)

    def json_object(
        self,
        query: Query,
        key_extractor: Callable[[Row], str],
        extractor: Callable[[Row], dict[str, Any]],
    ) -> dict[str, dict[str, Any]]:
        """JSON object keyed per row; the last row wins for duplicate keys."""
        return self.hash_map(query, key_extractor, extractor)

    def for_each(self, query: Query, operator: Callable[[Row], None]) -> None:
        """Apply ``operator`` to every row in cursor order."""

        def visit(cursor: CursorPort) -> None:
            for row in iter_rows(cursor):
                operator(row)

        self.query(query, visit)

    def for_each_result_set(
        self,
        call: Query,
        operator: Callable[[CursorPort, int], None],
        stmt_proc: Callable[[StatementPort], None] | None = None,
    ) -> None:
        """
        Run a stored procedure and visit every result set it returns.

        ``stmt_proc`` sees the executed statement first (for out
        parameters). Each result set is then passed to ``operator``
        with its zero-based index and closed before the next one is
        requested.

        Raises:
            ValueError: If ``call`` is not a callable query.
        """
        if not call.is_callable:
            raise ValueError("for_each_result_set requires a callable query (use sql_call)")

        with closing(self.prepare(call)) as stmt:
            results = stmt.execute()
            if stmt_proc is not None:
                stmt_proc(stmt)

            index = 0
            while results:
                with closing(stmt.result_set()) as cursor:
                    operator(cursor, index)
                index += 1
                results = stmt.more_results()

    # =========================================================================
    # Generated keys
    # =========================================================================

    def _first_key(self, query: Query, read: Callable[[Row], A]) -> A | None:
        def first_key(stmt: StatementPort) -> A | None:
            with closing(stmt.generated_keys()) as keys:
                if keys.next():
                    return read(Row(keys))
                return None

        return self.update_with_keys(query, first_key)

    def _non_null_keys(self, query: Query, read: Callable[[Row], int | None]) -> list[int] | None:
        def all_keys(stmt: StatementPort) -> list[int]:
            ids: list[int] = []
            with closing(stmt.generated_keys()) as keys:
                for row in iter_rows(keys):
                    value = read(row)
                    if not row.was_null():
                        ids.append(value)
            return ids

        return self.update_with_keys(query, all_keys)

    def update_get_id(self, query: Query) -> int | None:
        """First generated key, or None if no row was affected or generated."""
        return self._first_key(query, lambda row: row.get_int(1))

    def update_get_long_id(self, query: Query) -> int | None:
        return self._first_key(query, lambda row: row.get_long(1))

    def update_get_key(self, query: Query, extractor: Callable[[Row], A]) -> A | None:
        """Extractor applied to the first generated-key row."""
        return self._first_key(query, extractor)

    def update_get_ids(self, query: Query) -> list[int] | None:
        """All generated keys in order, skipping NULL keys."""
        return self._non_null_keys(query, lambda row: row.get_int(1))

    def update_get_long_ids(self, query: Query) -> list[int] | None:
        return self._non_null_keys(query, lambda row: row.get_long(1))

    def update_get_keys(self, query: Query, extractor: Callable[[Row], A]) -> list[A] | None:
        """Extractor applied to every generated-key row; NULL keys are not skipped."""

        def all_keys(stmt: StatementPort) -> list[A]:
            with closing(stmt.generated_keys()) as keys:
                return [extractor(row) for row in iter_rows(keys)]

        return self.update_with_keys(query, all_keys)

    # =========================================================================
    # Transactions
    # =========================================================================

    def transaction(self, operation: Callable[["Transaction"], A]) -> A:
        """
        Run ``operation`` as one unit of work.

        Outside autocommit mode: commit when ``operation`` returns, roll
        back and re-raise when it raises. A final commit always follows,
        so a failed unit of work is seen by the driver as rollback then
        commit. In autocommit mode no begin/commit/rollback is issued.

        Returns:
            Whatever ``operation`` returns.
        """
        connection = self.connection
        try:
            if not connection.autocommit:
                connection.begin()
            tx = Transaction(connection, self.auto_generated_keys, self.key_policy)
            result = operation(tx)
            if not connection.autocommit:
                connection.commit()
            return result
        except BaseException as e:
            if not connection.autocommit:
                logger.warning("Rolling back transaction: {}", e)
                connection.rollback()
            raise
        finally:
            if not connection.autocommit:
                connection.commit()


class Transaction(Session):
    """
    Session surface scoped to one unit of work.

    Only created by Session.transaction and only valid inside the
    callback it is passed to. It never closes the connection and
    cannot start a nested transaction.
    """

    def close(self) -> None:
        pass

    def transaction(self, operation: Callable[["Transaction"], A]) -> A:
        raise TransactionError("Nested transactions are not supported")
