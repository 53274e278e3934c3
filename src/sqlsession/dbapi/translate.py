"""Translation of DB-API driver exceptions into sqlsession errors."""

from sqlsession.errors import BindingError, DatabaseError, ExecutionError, PreparationError

_BINDING_MARKERS = ("binding", "bind parameter", "parameters supplied", "not all arguments converted")
_PREPARATION_MARKERS = ("syntax", "no such table", "no such column", "no such function")


def translate_driver_error(exc: BaseException, sql: str | None = None) -> DatabaseError:
    """
    Classify a driver exception raised while running a statement.

    DB-API drivers prepare lazily, so bad SQL surfaces on execute.
    The classification uses the PEP 249 exception class name and
    well-known message fragments shared by common drivers.

    Args:
        exc: Exception raised by the driver.
        sql: Statement that was running.

    Returns:
        BindingError, PreparationError or ExecutionError wrapping exc.
    """
    message = str(exc) or type(exc).__name__
    lowered = message.lower()

    if any(marker in lowered for marker in _BINDING_MARKERS):
        return BindingError(message, sql=sql)
    if type(exc).__name__ == "ProgrammingError" or any(
        marker in lowered for marker in _PREPARATION_MARKERS
    ):
        return PreparationError(message, sql=sql)
    return ExecutionError(message, sql=sql)
