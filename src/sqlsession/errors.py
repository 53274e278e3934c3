"""sqlsession error types.

All custom exceptions inherit from SqlSessionError to allow
catching any sqlsession-specific error. Failures reported by the
database driver are wrapped in a DatabaseError subclass with the
original exception chained as ``__cause__``.
"""


class SqlSessionError(Exception):
    """Base exception for all sqlsession errors."""

    pass


class ConfigurationError(SqlSessionError):
    """Invalid configuration."""

    pass


class RowAccessError(SqlSessionError):
    """A row view was used after its cursor moved on or closed."""

    pass


class DatabaseError(SqlSessionError):
    """Database operation failed."""

    def __init__(self, message: str, sql: str | None = None) -> None:
        super().__init__(message)
        self.sql = sql


class PreparationError(DatabaseError):
    """Driver rejected the SQL text or the generated-key mode."""

    pass


class BindingError(DatabaseError):
    """Parameter count or type does not match the statement."""

    pass


class ExecutionError(DatabaseError):
    """Driver failed to execute a prepared statement."""

    pass


class TransactionError(DatabaseError):
    """Transaction demarcation failed."""

    pass


class CommitError(TransactionError):
    """Commit failed."""

    pass


class RollbackError(TransactionError):
    """Rollback failed."""

    pass
