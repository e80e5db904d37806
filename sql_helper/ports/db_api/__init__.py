"""DB-API adapter and dialect exports."""

from .async_database import AsyncDatabase
from .connectors import aioodbc_connector, pyodbc_connector
from .dialects import Dialect, PostgresDialect, SQLiteDialect, SQLServerDialect

__all__ = [
    "AsyncDatabase",
    "Dialect",
    "PostgresDialect",
    "SQLiteDialect",
    "SQLServerDialect",
    "aioodbc_connector",
    "pyodbc_connector",
]
