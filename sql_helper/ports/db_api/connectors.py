"""Connector factories for the SQL Server ODBC drivers.

These are optional and require `aioodbc` or `pyodbc` installed
(`pip install sql-helper[mssql]`).
"""

from __future__ import annotations

from typing import Any

from ...core.contracts import Connector


def aioodbc_connector(**defaults: Any) -> Connector:
    """Return a connector that opens `aioodbc` connections from a DSN string."""

    try:
        import aioodbc  # type: ignore[import-not-found]
    except ImportError as exc:  # pragma: no cover - env dependent
        raise ImportError(
            "aioodbc is required for aioodbc_connector. "
            "Install with `pip install aioodbc`."
        ) from exc

    async def connect(connection_string: str, **kwargs: Any) -> Any:
        options = {**defaults, **kwargs}
        return await aioodbc.connect(dsn=connection_string, **options)

    return connect


def pyodbc_connector(**defaults: Any) -> Connector:
    """Return a connector that opens blocking `pyodbc` connections.

    Driver calls on these connections run on a per-connection worker thread.
    """

    try:
        import pyodbc  # type: ignore[import-not-found]
    except ImportError as exc:  # pragma: no cover - env dependent
        raise ImportError(
            "pyodbc is required for pyodbc_connector. "
            "Install with `pip install pyodbc`."
        ) from exc

    def connect(connection_string: str, **kwargs: Any) -> Any:
        options = {**defaults, **kwargs}
        return pyodbc.connect(connection_string, **options)

    return connect
