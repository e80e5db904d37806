"""Async SQL and stored-procedure execution helper for DB-API drivers."""

import logging

from .core import (
    Command,
    CommandType,
    ConfigurationError,
    DbType,
    ExecutionError,
    MappingError,
    PagedResult,
    ResultSet,
    Row,
    SqlHelper,
    SqlHelperConfig,
    SqlHelperError,
    SqlOutputResult,
)
from .ports import (
    AsyncDatabase,
    Dialect,
    PostgresDialect,
    SQLiteDialect,
    SQLServerDialect,
    aioodbc_connector,
    pyodbc_connector,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "SqlHelper",
    "SqlHelperConfig",
    "SqlHelperError",
    "ConfigurationError",
    "ExecutionError",
    "MappingError",
    "Command",
    "CommandType",
    "DbType",
    "PagedResult",
    "SqlOutputResult",
    "ResultSet",
    "Row",
    "AsyncDatabase",
    "Dialect",
    "SQLServerDialect",
    "SQLiteDialect",
    "PostgresDialect",
    "aioodbc_connector",
    "pyodbc_connector",
]
