"""Forward-only result cursor over a DB-API cursor or buffered rows."""

from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from typing import Any

from sqlsession.dbapi.translate import translate_driver_error
from sqlsession.errors import ExecutionError, RowAccessError
from sqlsession.rows import Row, iter_rows

FetchOne = Callable[[], Sequence[Any] | Mapping[str, Any] | None]


def description_columns(description: Sequence[Sequence[Any]] | None) -> list[str]:
    """Column labels from a PEP 249 cursor description."""
    if not description:
        return []
    return [str(col[0]) for col in description]


class ResultCursor:
    """
    Single-pass cursor implementing CursorPort.

    Rows are pulled one at a time through ``fetchone``. Closing the
    cursor never closes the DB-API cursor it reads from; that belongs
    to the owning statement.
    """

    def __init__(
        self,
        fetchone: FetchOne,
        columns: list[str],
        error_types: tuple[type[BaseException], ...] = (),
        sql: str | None = None,
    ) -> None:
        self._fetchone = fetchone
        self._columns = columns
        self._index: dict[str, int] = {}
        for i, name in enumerate(columns):
            self._index.setdefault(name.lower(), i)
        self._error_types = error_types
        self._sql = sql
        self._current: Sequence[Any] | None = None
        self._position = 0
        self._exhausted = False
        self._closed = False
        self._last_was_null = False

    @classmethod
    def from_dbapi(
        cls,
        cursor: Any,
        error_types: tuple[type[BaseException], ...] = (),
        sql: str | None = None,
    ) -> "ResultCursor":
        """Wrap the current result set of a DB-API cursor."""
        return cls(cursor.fetchone, description_columns(cursor.description), error_types, sql)

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[Any]], columns: list[str]) -> "ResultCursor":
        """Cursor over rows already fetched from the driver."""
        remaining = iter(list(rows))
        return cls(lambda: next(remaining, None), columns)

    @classmethod
    def empty(cls, columns: list[str] | None = None) -> "ResultCursor":
        return cls(lambda: None, columns or [])

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def position(self) -> int:
        return self._position

    def next(self) -> bool:
        """Advance to the next row; False once exhausted."""
        if self._closed:
            raise ExecutionError("Result cursor is closed", sql=self._sql)
        if self._exhausted:
            return False

        try:
            row = self._fetchone()
        except self._error_types as e:
            raise translate_driver_error(e, self._sql) from e

        if row is None:
            self._current = None
            self._exhausted = True
            return False

        if isinstance(row, Mapping):
            row = tuple(row.values())
        self._current = row
        self._position += 1
        return True

    def _column_index(self, column: int | str) -> int:
        if isinstance(column, int):
            width = len(self._current) if self._current is not None else len(self._columns)
            if not 1 <= column <= width:
                raise RowAccessError(f"Column position {column} out of range 1..{width}")
            return column - 1
        try:
            return self._index[column.lower()]
        except KeyError:
            raise RowAccessError(f"Unknown column {column!r}; available: {self._columns}") from None

    def get(self, column: int | str) -> Any:
        """Value of a column of the current row."""
        if self._closed:
            raise RowAccessError("Result cursor is closed")
        if self._current is None:
            raise RowAccessError("Cursor is not positioned on a row")
        value = self._current[self._column_index(column)]
        self._last_was_null = value is None
        return value

    def was_null(self) -> bool:
        return self._last_was_null

    def close(self) -> None:
        self._closed = True
        self._current = None

    def __iter__(self) -> Iterator[Row]:
        return iter_rows(self)

    def __enter__(self) -> "ResultCursor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
