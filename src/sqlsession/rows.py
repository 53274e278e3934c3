"""Row views over a forward-only cursor.

A Row reads the cursor's current position. It is only valid while
the cursor stays on that position and remains open; extractors must
copy what they need instead of keeping the Row.
"""

from collections.abc import Callable, Iterator
from decimal import Decimal
from typing import Any

from sqlsession.errors import RowAccessError
from sqlsession.ports.driver import CursorPort

_TRUE_STRINGS = frozenset({"1", "t", "true", "y", "yes", "on"})


class Row:
    """Typed read access to the current cursor row.

    Columns are addressed by label or by 1-based position. Every
    getter returns None for SQL NULL and records it for was_null().
    """

    def __init__(self, cursor: CursorPort) -> None:
        self._cursor = cursor
        self._position = cursor.position

    @property
    def row_number(self) -> int:
        """One-based position of this row in its result set."""
        return self._position

    @property
    def columns(self) -> list[str]:
        """Column labels of the underlying result set."""
        return self._cursor.columns

    def _read(self, column: int | str, convert: Callable[[Any], Any] | None = None) -> Any:
        if self._cursor.closed:
            raise RowAccessError(f"Row {self._position} read after its cursor was closed")
        if self._cursor.position != self._position:
            raise RowAccessError(
                f"Row {self._position} read after the cursor moved to row {self._cursor.position}"
            )
        value = self._cursor.get(column)
        if value is None or convert is None:
            return value
        try:
            return convert(value)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise RowAccessError(f"Cannot convert column {column!r} value {value!r}: {e}") from e

    def get(self, column: int | str) -> Any:
        """Raw driver value."""
        return self._read(column)

    def get_int(self, column: int | str) -> int | None:
        return self._read(column, int)

    def get_long(self, column: int | str) -> int | None:
        return self._read(column, int)

    def get_float(self, column: int | str) -> float | None:
        return self._read(column, float)

    def get_decimal(self, column: int | str) -> Decimal | None:
        return self._read(column, lambda v: Decimal(str(v)) if isinstance(v, float) else Decimal(v))

    def get_str(self, column: int | str) -> str | None:
        return self._read(column, lambda v: v.decode() if isinstance(v, bytes | bytearray) else str(v))

    def get_bool(self, column: int | str) -> bool | None:
        return self._read(
            column, lambda v: v.strip().lower() in _TRUE_STRINGS if isinstance(v, str) else bool(v)
        )

    def get_bytes(self, column: int | str) -> bytes | None:
        return self._read(column, lambda v: v.encode() if isinstance(v, str) else bytes(v))

    def was_null(self) -> bool:
        """Whether the last value read from the cursor was SQL NULL."""
        return self._cursor.was_null()

    def to_dict(self) -> dict[str, Any]:
        """Copy the row into a label -> value mapping."""
        return {name: self._read(index) for index, name in enumerate(self.columns, start=1)}

    def __repr__(self) -> str:
        return f"Row(row_number={self._position}, columns={self.columns!r})"


def iter_rows(cursor: CursorPort) -> Iterator[Row]:
    """Advance the cursor to exhaustion, yielding a view per row."""
    while cursor.next():
        yield Row(cursor)
