"""Public port exports for concrete adapter implementations."""

from .db_api import (
    AsyncDatabase,
    Dialect,
    PostgresDialect,
    SQLiteDialect,
    SQLServerDialect,
    aioodbc_connector,
    pyodbc_connector,
)

__all__ = [
    "AsyncDatabase",
    "Dialect",
    "SQLServerDialect",
    "SQLiteDialect",
    "PostgresDialect",
    "aioodbc_connector",
    "pyodbc_connector",
]
