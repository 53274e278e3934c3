"""sqlsession utility modules."""

from sqlsession.utils.logging import configure_logging

__all__ = [
    "configure_logging",
]
