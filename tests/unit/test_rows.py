"""Tests for Row views and ResultCursor."""

import sqlite3
from decimal import Decimal

import pytest

from sqlsession.dbapi.cursor import ResultCursor, description_columns
from sqlsession.errors import ExecutionError, RowAccessError
from sqlsession.rows import Row, iter_rows


def make_cursor(*rows: tuple, columns: tuple[str, ...] = ("id", "name")) -> ResultCursor:
    return ResultCursor.from_rows(rows, list(columns))


class TestRowGetters:
    """Test typed getters."""

    def test_by_label_and_position(self) -> None:
        cursor = make_cursor((1, "ada"))
        cursor.next()
        row = Row(cursor)

        assert row.get("name") == "ada"
        assert row.get(1) == 1
        assert row.get("NAME") == "ada"

    def test_conversions(self) -> None:
        cursor = make_cursor(
            ("7", b"bytes", 1.25, "yes", "text", 0),
            columns=("n", "b", "f", "flag", "s", "zero"),
        )
        cursor.next()
        row = Row(cursor)

        assert row.get_int("n") == 7
        assert row.get_long("n") == 7
        assert row.get_str("b") == "bytes"
        assert row.get_float("n") == 7.0
        assert row.get_decimal("f") == Decimal("1.25")
        assert row.get_bool("flag") is True
        assert row.get_bool("zero") is False
        assert row.get_bytes("s") == b"text"

    def test_null_values(self) -> None:
        cursor = make_cursor((None, "x"))
        cursor.next()
        row = Row(cursor)

        assert row.get_int("id") is None
        assert row.was_null()
        assert row.get_str("name") == "x"
        assert not row.was_null()

    def test_conversion_failure(self) -> None:
        cursor = make_cursor(("abc", "x"))
        cursor.next()

        with pytest.raises(RowAccessError, match="Cannot convert"):
            Row(cursor).get_int("id")

    def test_unknown_column(self) -> None:
        cursor = make_cursor((1, "x"))
        cursor.next()

        with pytest.raises(RowAccessError, match="Unknown column"):
            Row(cursor).get("missing")
        with pytest.raises(RowAccessError, match="out of range"):
            Row(cursor).get(3)

    def test_to_dict(self) -> None:
        cursor = make_cursor((1, "ada"))
        cursor.next()

        assert Row(cursor).to_dict() == {"id": 1, "name": "ada"}


class TestRowValidity:
    """Test that rows are only readable at their own position."""

    def test_row_after_cursor_moved(self) -> None:
        cursor = make_cursor((1, "a"), (2, "b"))
        cursor.next()
        row = Row(cursor)
        cursor.next()

        with pytest.raises(RowAccessError, match="moved"):
            row.get("id")

    def test_row_after_cursor_closed(self) -> None:
        cursor = make_cursor((1, "a"))
        cursor.next()
        row = Row(cursor)
        cursor.close()

        with pytest.raises(RowAccessError, match="closed"):
            row.get("id")

    def test_row_numbers(self) -> None:
        cursor = make_cursor((1, "a"), (2, "b"))

        assert [row.row_number for row in iter_rows(cursor)] == [1, 2]


class TestResultCursor:
    """Test the forward-only cursor."""

    def test_next_until_exhausted(self) -> None:
        cursor = make_cursor((1, "a"))

        assert cursor.next() is True
        assert cursor.next() is False
        assert cursor.next() is False
        assert cursor.position == 1

    def test_get_without_row(self) -> None:
        with pytest.raises(RowAccessError):
            make_cursor((1, "a")).get("id")

    def test_next_after_close(self) -> None:
        cursor = make_cursor((1, "a"))
        cursor.close()

        with pytest.raises(ExecutionError):
            cursor.next()

    def test_mapping_rows(self) -> None:
        cursor = ResultCursor.from_rows([{"id": 3, "name": "c"}], ["id", "name"])
        cursor.next()

        assert cursor.get(2) == "c"

    def test_iteration_and_context_manager(self) -> None:
        with make_cursor((1, "a"), (2, "b")) as cursor:
            ids = [row.get_int("id") for row in cursor]

        assert ids == [1, 2]
        assert cursor.closed

    def test_empty(self) -> None:
        cursor = ResultCursor.empty()

        assert cursor.columns == []
        assert cursor.next() is False

    def test_fetch_error_translated(self) -> None:
        def fetchone():
            raise sqlite3.OperationalError("database is locked")

        cursor = ResultCursor(fetchone, ["id"], (sqlite3.Error,), sql="SELECT id FROM t")

        with pytest.raises(ExecutionError) as exc_info:
            cursor.next()

        assert exc_info.value.sql == "SELECT id FROM t"
        assert isinstance(exc_info.value.__cause__, sqlite3.OperationalError)

    def test_description_columns(self) -> None:
        description = [("id", None, None, None, None, None, None), ("name",) + (None,) * 6]

        assert description_columns(description) == ["id", "name"]
        assert description_columns(None) == []
