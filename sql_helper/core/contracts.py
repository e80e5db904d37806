"""Core port contracts used by the helper and dialects."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from .commands import Command, CompiledCommand, DbType


class DialectPort(Protocol):
    """SQL rendering behavior required by `SqlHelper`."""

    name: str
    paramstyle: str
    supports_stored_procedures: bool

    def placeholder(self, key: str) -> str: ...

    def compile(self, command: Command) -> CompiledCommand: ...

    def paginate(self, base_query: str, offset: int, limit: int) -> str: ...

    def output_type_sql(self, db_type: DbType) -> str: ...


# `connect(connection_string, **kwargs)` returning a DB-API connection or an
# awaitable resolving to one.
Connector = Callable[..., Any]
