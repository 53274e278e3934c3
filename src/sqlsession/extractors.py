"""Ready-made row extractors.

Each factory returns a function taking a Row, suitable for
Session.list, Session.first, Session.hash_map and friends.
"""

from collections.abc import Callable
from typing import Any

from sqlsession.rows import Row


def extract_any(column: int | str) -> Callable[[Row], Any]:
    """Raw value of one column."""
    return lambda row: row.get(column)


def extract_int(column: int | str) -> Callable[[Row], int | None]:
    """Integer value of one column."""
    return lambda row: row.get_int(column)


def extract_long(column: int | str) -> Callable[[Row], int | None]:
    return lambda row: row.get_long(column)


def extract_str(column: int | str) -> Callable[[Row], str | None]:
    """String value of one column."""
    return lambda row: row.get_str(column)


def extract_float(column: int | str) -> Callable[[Row], float | None]:
    return lambda row: row.get_float(column)


def extract_bool(column: int | str) -> Callable[[Row], bool | None]:
    return lambda row: row.get_bool(column)


def extract_dict(row: Row) -> dict[str, Any]:
    """Whole row as a JSON-ready mapping of column label to value."""
    return row.to_dict()


def extract_tuple(*columns: int | str) -> Callable[[Row], tuple[Any, ...]]:
    """Several columns as a tuple, in the order given."""
    return lambda row: tuple(row.get(column) for column in columns)
