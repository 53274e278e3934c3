"""Query values and the named-parameter query builder."""

import re
from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from sqlsession.errors import BindingError
from sqlsession.ports.driver import StatementPort

_NAMED_PARAM = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")
_NUMERIC_PARAM = re.compile(r"(?<![:\w]):(\d+)")
_QMARK_PARAM = re.compile(r"\?(\d*)")
_PLACEHOLDERS = {"qmark": "?", "format": "%s", "pyformat": "%s"}


class QueryKind(StrEnum):
    """Statement kind; callable statements are prepared differently."""

    PLAIN = "plain"
    CALLABLE = "callable"


class Query(BaseModel):
    """
    Immutable SQL text plus ordered parameter values.

    The statement is driver-ready: named placeholders have already
    been replaced by the driver's positional placeholders.
    """

    statement: str = Field(min_length=1)
    params: tuple[Any, ...] = ()
    kind: QueryKind = QueryKind.PLAIN

    model_config = {"frozen": True}

    @property
    def is_callable(self) -> bool:
        """Whether this is a stored-procedure call."""
        return self.kind is QueryKind.CALLABLE

    def populate_params(self, stmt: StatementPort) -> None:
        """Bind this query's parameters on a prepared statement."""
        stmt.bind_parameters(self.params)


def split_sql(statement: str) -> list[tuple[bool, str]]:
    """
    Split SQL text into code and non-code segments.

    String literals, quoted identifiers and comments are non-code,
    so placeholders inside them are never touched.

    Returns:
        List of (is_code, text) pairs covering the whole statement.
    """
    segments: list[tuple[bool, str]] = []
    n = len(statement)
    code_start = i = 0
    while i < n:
        ch = statement[i]
        if ch in ("'", '"'):
            end = i + 1
            while end < n:
                if statement[end] == ch:
                    if end + 1 < n and statement[end + 1] == ch:
                        end += 2
                        continue
                    break
                end += 1
            end = min(end + 1, n)
        elif statement.startswith("--", i):
            end = statement.find("\n", i)
            end = n if end == -1 else end
        elif statement.startswith("/*", i):
            end = statement.find("*/", i + 2)
            end = n if end == -1 else end + 2
        else:
            i += 1
            continue
        if code_start < i:
            segments.append((True, statement[code_start:i]))
        segments.append((False, statement[i:end]))
        code_start = i = end
    if code_start < n:
        segments.append((True, statement[code_start:]))
    return segments


def named_placeholders(statement: str) -> list[str]:
    """Names of ``:name`` placeholders in order of appearance."""
    names: list[str] = []
    for is_code, text in split_sql(statement):
        if is_code:
            names.extend(_NAMED_PARAM.findall(text))
    return names


def leading_keyword(statement: str) -> str:
    """First SQL keyword of a statement, upper-cased; '' if there is none."""
    for is_code, text in split_sql(statement):
        if is_code:
            words = text.split()
            if words:
                return re.split(r"\W", words[0], maxsplit=1)[0].upper()
    return ""


def count_placeholders(statement: str, paramstyle: str) -> int | None:
    """
    Count positional placeholders for a DB-API paramstyle.

    Numbered ``?N`` placeholders may repeat an index; a bare ``?``
    takes the index after the highest one seen so far, as in sqlite.

    Returns:
        Number of parameters the statement expects, or None when
        the paramstyle is not positional.
    """
    count = 0
    for is_code, text in split_sql(statement):
        if not is_code:
            continue
        if paramstyle == "qmark":
            for number in _QMARK_PARAM.findall(text):
                count = max(count, int(number)) if number else count + 1
        elif paramstyle in ("format", "pyformat"):
            count += text.replace("%%", "").count("%s")
        elif paramstyle == "numeric":
            count = max([count, *(int(n) for n in _NUMERIC_PARAM.findall(text))])
        else:
            return None
    return count


def _substitute(statement: str, paramstyle: str) -> str:
    position = 0

    def replace(_match: re.Match[str]) -> str:
        nonlocal position
        position += 1
        if paramstyle == "numeric":
            return f":{position}"
        return _PLACEHOLDERS[paramstyle]

    return "".join(
        _NAMED_PARAM.sub(replace, text) if is_code else text
        for is_code, text in split_sql(statement)
    )


def _build(
    statement: str,
    params: Sequence[Any],
    input_params: Mapping[str, Any] | None,
    paramstyle: str,
    kind: QueryKind,
) -> Query:
    if paramstyle not in ("qmark", "format", "pyformat", "numeric"):
        raise ValueError(f"Unsupported paramstyle for named parameters: {paramstyle}")

    names = named_placeholders(statement)
    if not names:
        if input_params:
            raise BindingError(
                f"Statement has no named placeholders for: {sorted(input_params)}",
                sql=statement,
            )
        return Query(statement=statement, params=tuple(params), kind=kind)

    if params:
        raise BindingError(
            "Positional parameters cannot be combined with named placeholders",
            sql=statement,
        )

    values = input_params or {}
    missing = [name for name in dict.fromkeys(names) if name not in values]
    if missing:
        raise BindingError(f"Missing values for named parameters: {missing}", sql=statement)

    return Query(
        statement=_substitute(statement, paramstyle),
        params=tuple(values[name] for name in names),
        kind=kind,
    )


def sql_query(
    statement: str,
    *params: Any,
    input_params: Mapping[str, Any] | None = None,
    paramstyle: str = "qmark",
) -> Query:
    """
    Build a plain query.

    Either pass positional values matching the driver's placeholders,
    or write ``:name`` placeholders and pass their values in
    ``input_params``. A name may appear more than once.

    Args:
        statement: SQL text.
        *params: Positional parameter values.
        input_params: Values for named placeholders.
        paramstyle: DB-API paramstyle the named placeholders become.

    Raises:
        BindingError: On missing names or mixed positional/named values.
    """
    return _build(statement, params, input_params, paramstyle, QueryKind.PLAIN)


def sql_call(
    statement: str,
    *params: Any,
    input_params: Mapping[str, Any] | None = None,
    paramstyle: str = "qmark",
) -> Query:
    """Build a stored-procedure call; see sql_query for the arguments."""
    return _build(statement, params, input_params, paramstyle, QueryKind.CALLABLE)
