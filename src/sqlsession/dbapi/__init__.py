"""DB-API 2.0 adapter implementing the driver ports.

Wraps any PEP 249 module (sqlite3, psycopg2, oracledb, ...) in the
Connection / Statement / ResultCursor contracts the session uses.
"""

from sqlsession.dbapi.connection import Connection
from sqlsession.dbapi.cursor import ResultCursor
from sqlsession.dbapi.statement import CallableStatement, Statement
from sqlsession.dbapi.translate import translate_driver_error

__all__ = [
    "CallableStatement",
    "Connection",
    "ResultCursor",
    "Statement",
    "translate_driver_error",
]
