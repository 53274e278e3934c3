"""Port interfaces for sqlsession.

Ports define the contracts that driver adapters must implement.
Session logic depends only on these abstractions, not on a
concrete DB-API module.
"""

from sqlsession.ports.driver import ConnectionPort, CursorPort, StatementPort

__all__ = [
    "ConnectionPort",
    "CursorPort",
    "StatementPort",
]
