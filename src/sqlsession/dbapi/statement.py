"""Prepared statements over a DB-API cursor."""

import re
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from loguru import logger

from sqlsession.dbapi.cursor import ResultCursor, description_columns
from sqlsession.dbapi.translate import translate_driver_error
from sqlsession.errors import BindingError, ExecutionError, PreparationError
from sqlsession.models.query import count_placeholders, leading_keyword

if TYPE_CHECKING:
    from sqlsession.dbapi.connection import Connection

_PROCEDURE_NAME = re.compile(r"^[A-Za-z_][\w$]*(\.[A-Za-z_][\w$]*)*$")

# Label used by drivers that report a bare rowid as the generated key.
GENERATED_KEY_LABEL = "GENERATED_KEY"

_INSERT_KEYWORDS = frozenset({"INSERT", "REPLACE"})


class Statement:
    """
    A statement prepared on one DB-API cursor.

    DB-API drivers prepare lazily: the SQL text is sent on execute,
    so syntax errors surface from the execute methods as
    PreparationError.
    """

    def __init__(
        self,
        connection: "Connection",
        sql: str,
        cursor: Any,
        return_keys: bool = False,
        key_columns: Sequence[str] | None = None,
    ) -> None:
        self.sql = sql
        self._connection = connection
        self._cursor = cursor
        self._return_keys = return_keys
        self._key_columns = list(key_columns) if key_columns else []
        self._params: tuple[Any, ...] = ()
        self._executed = False
        self._closed = False
        self._returned: list[Sequence[Any]] | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def returns_generated_keys(self) -> bool:
        return self._return_keys

    @property
    def key_columns(self) -> list[str]:
        return list(self._key_columns)

    def bind_parameters(self, params: Sequence[Any]) -> None:
        """Bind parameter values, checking the count where the paramstyle allows."""
        self._check_open()
        expected = count_placeholders(self.sql, self._connection.paramstyle)
        if expected is not None and expected != len(params):
            raise BindingError(
                f"Statement expects {expected} parameter(s), got {len(params)}", sql=self.sql
            )
        self._params = tuple(params)

    def _check_open(self) -> None:
        if self._closed:
            raise ExecutionError("Statement is closed", sql=self.sql)

    def _run(self) -> None:
        self._check_open()
        logger.bind(sql=self.sql).debug("Executing: {} params={}", self.sql, len(self._params))
        self._returned = None
        try:
            self._cursor.execute(self.sql, self._params)
        except self._connection.error_types as e:
            raise translate_driver_error(e, self.sql) from e
        self._executed = True

    def _fetch_returned(self) -> list[Sequence[Any]]:
        if self._returned is None:
            try:
                self._returned = list(self._cursor.fetchall())
            except self._connection.error_types as e:
                raise translate_driver_error(e, self.sql) from e
        return self._returned

    def _result_cursor(self) -> ResultCursor:
        return ResultCursor.from_dbapi(self._cursor, self._connection.error_types, self.sql)

    def execute_query(self) -> ResultCursor:
        """Execute and return a cursor over the result set."""
        self._run()
        if self._cursor.description is None:
            raise ExecutionError("Query did not produce a result set", sql=self.sql)
        return self._result_cursor()

    def execute_update(self) -> int:
        """Execute and return the number of affected rows."""
        self._run()
        count = self._cursor.rowcount
        if self._return_keys and self._cursor.description is not None:
            # RETURNING rows are the keys; some drivers only count them once fetched.
            count = max(self._cursor.rowcount, len(self._fetch_returned()))
        return count if count > 0 else 0

    def execute(self) -> bool:
        """Execute and report whether a result set was produced."""
        self._run()
        return self._cursor.description is not None

    def generated_keys(self) -> ResultCursor:
        """
        Cursor over the keys generated by the last execution.

        Rows returned by the statement (``RETURNING``) are the keys,
        projected onto the key columns when the statement was prepared
        with an explicit column list. Otherwise, for INSERT and REPLACE
        statements only, the driver's ``lastrowid`` is reported as a
        single-row result; any other statement yields no keys.

        Raises:
            PreparationError: If key retrieval was not requested.
        """
        self._check_open()
        if not self._return_keys:
            raise PreparationError(
                "Statement was not prepared to return generated keys", sql=self.sql
            )
        if not self._executed:
            raise ExecutionError("Statement has not been executed", sql=self.sql)

        if self._cursor.description is not None:
            columns = description_columns(self._cursor.description)
            rows = self._fetch_returned()
            if self._key_columns:
                lowered = [name.lower() for name in columns]
                missing = [k for k in self._key_columns if k.lower() not in lowered]
                if missing:
                    raise ExecutionError(
                        f"Returned rows do not include key column(s): {missing}", sql=self.sql
                    )
                indexes = [lowered.index(k.lower()) for k in self._key_columns]
                rows = [tuple(row[i] for i in indexes) for row in rows]
                columns = [columns[i] for i in indexes]
            return ResultCursor.from_rows(rows, columns)

        if leading_keyword(self.sql) not in _INSERT_KEYWORDS:
            return ResultCursor.empty()
        lastrowid = getattr(self._cursor, "lastrowid", None)
        if lastrowid is None:
            return ResultCursor.empty()
        label = self._key_columns[0] if self._key_columns else GENERATED_KEY_LABEL
        return ResultCursor.from_rows([(lastrowid,)], [label])

    def result_set(self) -> ResultCursor:
        """Cursor over the current result set."""
        self._check_open()
        if self._cursor.description is None:
            raise ExecutionError("No current result set", sql=self.sql)
        return self._result_cursor()

    def more_results(self) -> bool:
        """Move to the next result set when the driver supports it."""
        self._check_open()
        nextset = getattr(self._cursor, "nextset", None)
        if nextset is None:
            return False
        try:
            advanced = nextset()
        except self._connection.error_types as e:
            if type(e).__name__ == "NotSupportedError":
                return False
            raise translate_driver_error(e, self.sql) from e
        return bool(advanced) and self._cursor.description is not None

    def close(self) -> None:
        """Release the DB-API cursor. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._cursor.close()
        except self._connection.error_types as e:
            raise translate_driver_error(e, self.sql) from e

    def __enter__(self) -> "Statement":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class CallableStatement(Statement):
    """
    Stored-procedure call.

    A bare procedure name runs through ``cursor.callproc`` and its
    (possibly modified) arguments are kept in ``out_parameters``.
    Any other text, such as ``CALL proc(?)``, is executed as SQL.
    """

    def __init__(self, connection: "Connection", sql: str, cursor: Any) -> None:
        super().__init__(connection, sql, cursor)
        self.out_parameters: Sequence[Any] | None = None

    @property
    def uses_callproc(self) -> bool:
        return bool(_PROCEDURE_NAME.match(self.sql.strip())) and hasattr(self._cursor, "callproc")

    def bind_parameters(self, params: Sequence[Any]) -> None:
        if self.uses_callproc:
            self._check_open()
            self._params = tuple(params)
            return
        super().bind_parameters(params)

    def _run(self) -> None:
        if not self.uses_callproc:
            super()._run()
            return

        self._check_open()
        name = self.sql.strip()
        logger.bind(sql=self.sql).debug("Calling procedure: {} params={}", name, len(self._params))
        try:
            self.out_parameters = self._cursor.callproc(name, self._params)
        except self._connection.error_types as e:
            raise translate_driver_error(e, self.sql) from e
        self._executed = True
