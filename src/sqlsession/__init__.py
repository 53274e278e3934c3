"""sqlsession: resource-safe SQL sessions over DB-API 2.0 drivers.

Build a Query with sql_query / sql_call, hand it to a Session
operation with an extractor, and let the session own the statement
and cursor lifecycle. Session.transaction wraps a unit of work in a
single commit-or-rollback decision.
"""

from sqlsession.config import Config, load_config
from sqlsession.dbapi import Connection
from sqlsession.errors import (
    BindingError,
    CommitError,
    ConfigurationError,
    DatabaseError,
    ExecutionError,
    PreparationError,
    RollbackError,
    RowAccessError,
    SqlSessionError,
    TransactionError,
)
from sqlsession.factory import SessionFactory
from sqlsession.models import Query, QueryKind, sql_call, sql_query
from sqlsession.policy import GeneratedKeyPolicy
from sqlsession.rows import Row
from sqlsession.session import Session, Transaction

__version__ = "0.1.0"

__all__ = [
    "BindingError",
    "CommitError",
    "Config",
    "ConfigurationError",
    "Connection",
    "DatabaseError",
    "ExecutionError",
    "GeneratedKeyPolicy",
    "PreparationError",
    "Query",
    "QueryKind",
    "RollbackError",
    "Row",
    "RowAccessError",
    "Session",
    "SessionFactory",
    "SqlSessionError",
    "Transaction",
    "TransactionError",
    "__version__",
    "load_config",
    "sql_call",
    "sql_query",
]
