"""Value models for sqlsession."""

from sqlsession.models.query import (
    Query,
    QueryKind,
    count_placeholders,
    leading_keyword,
    named_placeholders,
    sql_call,
    sql_query,
)

__all__ = [
    "Query",
    "QueryKind",
    "count_placeholders",
    "leading_keyword",
    "named_placeholders",
    "sql_call",
    "sql_query",
]
