"""Async facade that executes SQL text and stored procedures.

Every call opens its own connection through the configured connector, binds
parameters, runs the command, maps rows with the caller's mapper, commits,
and releases the connection on every exit path.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar

from ..ports.db_api.async_database import AsyncDatabase
from .commands import (
    Command,
    CommandType,
    CompiledCommand,
    DbType,
    DbTypeInput,
    bind_output_parameters,
    bind_parameters,
)
from .config import SqlHelperConfig
from .contracts import Connector, DialectPort
from .errors import ConfigurationError, ExecutionError, MappingError, SqlHelperError
from .results import PagedResult, SqlOutputResult
from .rows import ResultSet, Row
from .types import QueryParams, RowMapper

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_Handler = Callable[[AsyncDatabase, Any, CompiledCommand], Awaitable[R]]

QUERY = "SQL query"
PROCEDURE = "stored procedure"

PAGE_NUMBER_PARAM = "@PageNumber"
PAGE_SIZE_PARAM = "@PageSize"
TOTAL_RECORDS_PARAM = "@TotalRecords"


def _identity(row: Row) -> Row:
    return row


def _first_column_as_int(row: Row) -> int:
    return _to_int(row[0])


def _to_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


def _validate_page(page_number: int, page_size: int) -> None:
    for name, value in (("page_number", page_number), ("page_size", page_size)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an int.")
        if value < 1:
            raise ValueError(f"{name} must be >= 1.")


class SqlHelper:
    """Stateless helper over one database, configured once per instance.

    Args:
        connector: Callable `connect(connection_string, **kwargs)` returning a
            DB-API connection, or an awaitable resolving to one.
        dialect: Dialect that renders parameters, procedure calls and paging.
        connection_string: Connection descriptor. A helper built without one
            is unconfigured until `configure()` returns a configured copy.
        **connect_kwargs: Extra keyword arguments passed to `connector`.
    """

    __slots__ = ("_connector", "_dialect", "_config")

    def __init__(
        self,
        connector: Connector,
        dialect: DialectPort,
        connection_string: Optional[str] = None,
        **connect_kwargs: Any,
    ):
        self._connector = connector
        self._dialect = dialect
        self._config = SqlHelperConfig(connection_string, connect_kwargs)

    @classmethod
    def from_config(
        cls, connector: Connector, dialect: DialectPort, config: SqlHelperConfig
    ) -> SqlHelper:
        return cls(connector, dialect, config.connection_string, **config.connect_kwargs)

    @property
    def config(self) -> SqlHelperConfig:
        return self._config

    @property
    def dialect(self) -> DialectPort:
        return self._dialect

    @property
    def is_configured(self) -> bool:
        return self._config.is_configured

    def configure(self, connection_string: str) -> SqlHelper:
        """Return a helper bound to `connection_string`.

        Raises:
            ValueError: If the connection string is blank.
        """

        return self.from_config(
            self._connector,
            self._dialect,
            self._config.with_connection_string(connection_string),
        )

    def _ensure_configured(self) -> str:
        connection_string = self._config.connection_string
        if connection_string is None or not connection_string.strip():
            raise ConfigurationError(
                "SqlHelper is not configured. "
                "Call SqlHelper.configure(connection_string) on app startup."
            )
        return connection_string

    async def _execute(self, command: Command, kind: str, handler: _Handler[R]) -> R:
        """Run one command on a fresh connection and hand its cursor to `handler`.

        Driver failures are wrapped once in `ExecutionError`; helper errors
        (mapping, configuration) pass through untouched.
        """

        connection_string = self._ensure_configured()
        try:
            compiled = self._dialect.compile(command)
            logger.debug(
                "Executing %s %r with parameters %s",
                kind,
                command.text,
                [p.name for p in command.parameters],
            )
            async with AsyncDatabase.connect(
                self._connector, connection_string, **self._config.connect_kwargs
            ) as db:
                cursor = await db.execute(compiled.sql, compiled.params)
                try:
                    result = await handler(db, cursor, compiled)
                finally:
                    await db.close_cursor(cursor)
                await db.commit()
                return result
        except SqlHelperError:
            raise
        except Exception as exc:
            error = ExecutionError(command.text, exc, kind=kind)
            logger.debug("%s", error)
            raise error from exc

    def _command(
        self, text: str, command_type: CommandType, parameters: QueryParams
    ) -> Command:
        command = Command(text, command_type)
        bind_parameters(command, parameters)
        return command

    async def _map_rows(
        self,
        db: AsyncDatabase,
        cursor: Any,
        command_text: str,
        map_row: RowMapper[T],
    ) -> List[T]:
        result: List[T] = []
        if not await db.skip_to_result_set(cursor):
            return result
        row_index = 0
        async for row in db.iter_rows(cursor):
            try:
                result.append(map_row(row))
            except Exception as exc:
                raise MappingError(command_text, row_index, exc) from exc
            row_index += 1
        logger.debug("Mapped %d rows from %r", len(result), command_text)
        return result

    async def _map_first(
        self,
        db: AsyncDatabase,
        cursor: Any,
        command_text: str,
        map_row: RowMapper[T],
    ) -> Optional[T]:
        if not await db.skip_to_result_set(cursor):
            return None
        row = await db.fetchone(cursor)
        if row is None:
            return None
        try:
            return map_row(row)
        except Exception as exc:
            raise MappingError(command_text, 0, exc) from exc

    # -- command-only -----------------------------------------------------

    async def execute_query(self, sql_query: str, parameters: QueryParams = None) -> int:
        """Execute SQL that returns no rows and return the affected-row count.

        The count is reported by the driver as is (`-1` when unknown).
        """

        async def handler(_db: AsyncDatabase, cursor: Any, _compiled: CompiledCommand) -> int:
            return getattr(cursor, "rowcount", -1)

        command = self._command(sql_query, CommandType.TEXT, parameters)
        return await self._execute(command, QUERY, handler)

    async def execute_stored_procedure(
        self, procedure_name: str, parameters: QueryParams = None
    ) -> bool:
        """Execute a stored procedure for its side effects; `True` on success."""

        async def handler(_db: AsyncDatabase, _cursor: Any, _compiled: CompiledCommand) -> bool:
            return True

        command = self._command(procedure_name, CommandType.STORED_PROCEDURE, parameters)
        return await self._execute(command, PROCEDURE, handler)

    # -- row lists ----------------------------------------------------------

    async def execute_query_list(
        self,
        sql_query: str,
        parameters: QueryParams = None,
        map_row: Optional[RowMapper[T]] = None,
    ) -> List[T]:
        """Execute SQL and map every row of the first result set, in order.

        Raises:
            MappingError: If `map_row` fails; no rows are returned.
        """

        mapper = map_row or _identity

        async def handler(db: AsyncDatabase, cursor: Any, _compiled: CompiledCommand) -> List[T]:
            return await self._map_rows(db, cursor, sql_query, mapper)

        command = self._command(sql_query, CommandType.TEXT, parameters)
        return await self._execute(command, QUERY, handler)

    async def execute_stored_procedure_list(
        self,
        procedure_name: str,
        parameters: QueryParams = None,
        map_row: Optional[RowMapper[T]] = None,
    ) -> List[T]:
        mapper = map_row or _identity

        async def handler(db: AsyncDatabase, cursor: Any, _compiled: CompiledCommand) -> List[T]:
            return await self._map_rows(db, cursor, procedure_name, mapper)

        command = self._command(procedure_name, CommandType.STORED_PROCEDURE, parameters)
        return await self._execute(command, PROCEDURE, handler)

    # -- single row ---------------------------------------------------------

    async def execute_query_single(
        self,
        sql_query: str,
        parameters: QueryParams = None,
        map_row: Optional[RowMapper[T]] = None,
    ) -> Optional[T]:
        """Execute SQL and map its first row, or return `None` when empty."""

        mapper = map_row or _identity

        async def handler(
            db: AsyncDatabase, cursor: Any, _compiled: CompiledCommand
        ) -> Optional[T]:
            return await self._map_first(db, cursor, sql_query, mapper)

        command = self._command(sql_query, CommandType.TEXT, parameters)
        return await self._execute(command, QUERY, handler)

    async def execute_stored_procedure_single(
        self,
        procedure_name: str,
        parameters: QueryParams = None,
        map_row: Optional[RowMapper[T]] = None,
    ) -> Optional[T]:
        mapper = map_row or _identity

        async def handler(
            db: AsyncDatabase, cursor: Any, _compiled: CompiledCommand
        ) -> Optional[T]:
            return await self._map_first(db, cursor, procedure_name, mapper)

        command = self._command(procedure_name, CommandType.STORED_PROCEDURE, parameters)
        return await self._execute(command, PROCEDURE, handler)

    # -- multiple result sets -------------------------------------------------

    async def _fetch_result_sets(
        self, db: AsyncDatabase, cursor: Any, _compiled: CompiledCommand
    ) -> List[ResultSet]:
        return await db.fetch_result_sets(cursor)

    async def execute_query_multiple_tables(
        self, sql_query: str, parameters: QueryParams = None
    ) -> List[ResultSet]:
        """Execute SQL and return every result set as raw rows."""

        command = self._command(sql_query, CommandType.TEXT, parameters)
        return await self._execute(command, QUERY, self._fetch_result_sets)

    async def execute_stored_procedure_multiple_tables(
        self, procedure_name: str, parameters: QueryParams = None
    ) -> List[ResultSet]:
        command = self._command(procedure_name, CommandType.STORED_PROCEDURE, parameters)
        return await self._execute(command, PROCEDURE, self._fetch_result_sets)

    # -- output parameters ----------------------------------------------------

    async def execute_stored_procedure_with_output(
        self,
        procedure_name: str,
        input_parameters: QueryParams,
        output_parameters: Optional[Mapping[str, DbTypeInput]],
        map_row: Optional[RowMapper[T]] = None,
    ) -> SqlOutputResult[T]:
        """Execute a stored procedure and read back its output parameters.

        Rows of the first result set are mapped like
        `execute_stored_procedure_list` when `map_row` is given; otherwise the
        procedure's rows are skipped. Output values the driver does not report
        come back as `None`, keyed by the names given in `output_parameters`.
        """

        async def handler(
            db: AsyncDatabase, cursor: Any, compiled: CompiledCommand
        ) -> SqlOutputResult[T]:
            # Output values arrive as the trailing result set, so each set is
            # read before advancing. Without a mapper only first rows are kept.
            result_sets: List[List[Row]] = []
            while True:
                if db.has_result_set(cursor):
                    if map_row is not None:
                        result_sets.append(await db.fetchall(cursor))
                    else:
                        first = await db.fetchone(cursor)
                        result_sets.append([first] if first is not None else [])
                if not await db.next_result_set(cursor):
                    break

            output_row: Optional[Row] = None
            if compiled.output_names and result_sets:
                trailing = result_sets.pop()
                output_row = trailing[0] if trailing else None

            data: List[T] = []
            if map_row is not None and result_sets:
                for row_index, row in enumerate(result_sets[0]):
                    try:
                        data.append(map_row(row))
                    except Exception as exc:
                        raise MappingError(procedure_name, row_index, exc) from exc

            outputs: Dict[str, Any] = {}
            for position, name in enumerate(compiled.output_names):
                if output_row is not None and position < len(output_row):
                    outputs[name] = output_row[position]
                else:
                    outputs[name] = None
            return SqlOutputResult(data=data, output_parameters=outputs)

        self._ensure_configured()
        command = self._command(procedure_name, CommandType.STORED_PROCEDURE, input_parameters)
        bind_output_parameters(command, output_parameters)
        return await self._execute(command, PROCEDURE, handler)

    # -- pagination -----------------------------------------------------------

    async def execute_stored_procedure_paginated(
        self,
        procedure_name: str,
        page_number: int,
        page_size: int,
        parameters: QueryParams = None,
        map_row: Optional[RowMapper[T]] = None,
    ) -> PagedResult[T]:
        """Execute a paging stored procedure and build a `PagedResult`.

        The procedure must accept `@PageNumber` and `@PageSize`, apply the
        window itself, and set the `@TotalRecords` output to the unpaged count.

        Raises:
            ValueError: If `page_number` or `page_size` is below 1.
        """

        self._ensure_configured()
        _validate_page(page_number, page_size)

        all_parameters: Dict[str, Any] = dict(parameters or {})
        all_parameters[PAGE_NUMBER_PARAM] = page_number
        all_parameters[PAGE_SIZE_PARAM] = page_size

        try:
            result = await self.execute_stored_procedure_with_output(
                procedure_name,
                all_parameters,
                {TOTAL_RECORDS_PARAM: DbType.INT},
                map_row or _identity,
            )
            total_records = _to_int(result.output_parameters.get(TOTAL_RECORDS_PARAM))
        except SqlHelperError:
            raise
        except Exception as exc:
            raise ExecutionError(
                procedure_name, exc, kind="paginated stored procedure"
            ) from exc

        return PagedResult(
            data=result.data,
            page_number=page_number,
            page_size=page_size,
            total_records=total_records,
        )

    async def execute_query_paginated(
        self,
        base_query: str,
        count_query: str,
        page_number: int,
        page_size: int,
        parameters: QueryParams = None,
        map_row: Optional[RowMapper[T]] = None,
    ) -> PagedResult[T]:
        """Count with `count_query`, then fetch one window of `base_query`.

        The window is ordered by the first projected column, which must give
        a stable order for pages to be consistent.

        Raises:
            ValueError: If `page_number` or `page_size` is below 1.
        """

        self._ensure_configured()
        _validate_page(page_number, page_size)

        total_records = await self.execute_query_single(
            count_query, parameters, _first_column_as_int
        )
        offset = (page_number - 1) * page_size
        try:
            paged_query = self._dialect.paginate(base_query, offset, page_size)
        except Exception as exc:
            raise ExecutionError(base_query, exc, kind="paginated SQL query") from exc

        data = await self.execute_query_list(paged_query, parameters, map_row or _identity)
        return PagedResult(
            data=data,
            page_number=page_number,
            page_size=page_size,
            total_records=total_records or 0,
        )
