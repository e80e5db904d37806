"""Async DB-API adapter that drives one connection for one helper call."""

from __future__ import annotations

import asyncio
import contextlib
import functools
import inspect
from collections.abc import AsyncIterator
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, List, Mapping, Optional, Tuple

from ...core._async_utils import _is_async_callable, _maybe_await
from ...core.contracts import Connector
from ...core.rows import ResultSet, Row
from ...core.types import DriverParams


class AsyncDatabase:
    """Async wrapper that normalizes execute, result-set, and row behavior.

    Async drivers (`aioodbc`) are awaited on the event loop. Connections from
    blocking DB-API drivers (`pyodbc`, `sqlite3`) opened through `connect`
    run every driver call on one worker thread owned by the connection, so
    other tasks keep running meanwhile. Without an executor, sync calls run
    inline.
    """

    def __init__(self, conn: Any, executor: Optional[Executor] = None):
        self.conn = conn
        self._executor = executor
        self._closed = False

    @classmethod
    @contextlib.asynccontextmanager
    async def connect(
        cls, connector: Connector, connection_string: str, **connect_kwargs: Any
    ) -> AsyncIterator[AsyncDatabase]:
        """Open one connection and release it on every exit path."""

        executor: Optional[Executor] = None
        if _is_async_callable(connector):
            conn = await connector(connection_string, **connect_kwargs)
        else:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sql_helper")
            try:
                conn = await _open_on(executor, connector, connection_string, connect_kwargs)
                if inspect.isawaitable(conn):
                    executor.shutdown(wait=False)
                    executor = None
                    conn = await conn
            except BaseException:
                if executor is not None:
                    executor.shutdown(wait=False)
                raise

        db = cls(conn, executor)
        try:
            yield db
        finally:
            await db.aclose()

    async def _call(self, func: Callable[..., Any], *args: Any) -> Any:
        """Run one driver call, off the event loop for blocking connections."""

        if self._executor is None:
            return await _maybe_await(func(*args))
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func, *args)

    async def _close(self, obj: Any) -> None:
        close = getattr(obj, "close", None)
        if callable(close):
            await self._call(close)

    async def execute(self, sql: str, params: DriverParams = None) -> Any:
        """Execute SQL with optional parameters and return cursor."""

        cur = await self._call(self.conn.cursor)
        try:
            if params:
                await self._call(cur.execute, sql, params)
            else:
                await self._call(cur.execute, sql)
        except BaseException:
            await self._close(cur)
            raise
        return cur

    async def commit(self) -> None:
        commit = getattr(self.conn, "commit", None)
        if callable(commit):
            await self._call(commit)

    def columns(self, cursor: Any) -> Tuple[str, ...]:
        desc = getattr(cursor, "description", None)
        if not desc:
            return ()
        return tuple(d[0] for d in desc)

    def has_result_set(self, cursor: Any) -> bool:
        """Return whether the cursor is positioned on a row-returning set."""

        return bool(getattr(cursor, "description", None))

    def _to_row(self, columns: Tuple[str, ...], raw: Any) -> Row:
        """Normalize one driver row into a `Row`.

        Supports mapping rows directly and sequence rows (tuples, `pyodbc.Row`,
        `sqlite3.Row`) via `cursor.description`.
        """

        if isinstance(raw, Mapping):
            return Row(tuple(raw.keys()), tuple(raw.values()))

        if not columns:
            raise TypeError("Cursor has no description; cannot read result rows.")

        if isinstance(raw, (tuple, list)):
            return Row(columns, raw)

        try:
            values = tuple(raw)
        except TypeError as exc:
            raise TypeError(f"Unsupported row type: {type(raw)}") from exc
        return Row(columns, values)

    async def iter_rows(self, cursor: Any) -> AsyncIterator[Row]:
        """Stream rows of the current result set in cursor order."""

        columns = self.columns(cursor)
        while True:
            raw = await self._call(cursor.fetchone)
            if raw is None:
                return
            yield self._to_row(columns, raw)

    async def fetchone(self, cursor: Any) -> Optional[Row]:
        raw = await self._call(cursor.fetchone)
        if raw is None:
            return None
        return self._to_row(self.columns(cursor), raw)

    async def fetchall(self, cursor: Any) -> List[Row]:
        columns = self.columns(cursor)
        rows = await self._call(cursor.fetchall)
        return [self._to_row(columns, r) for r in rows]

    async def next_result_set(self, cursor: Any) -> bool:
        """Advance to the next result set; drivers without `nextset` have one."""

        nextset = getattr(cursor, "nextset", None)
        if not callable(nextset):
            return False
        return bool(await self._call(nextset))

    async def skip_to_result_set(self, cursor: Any) -> bool:
        """Skip row-count-only sets until one with columns, if any."""

        while not self.has_result_set(cursor):
            if not await self.next_result_set(cursor):
                return False
        return True

    async def fetch_result_sets(self, cursor: Any) -> List[ResultSet]:
        """Materialize every row-returning result set of the command."""

        result_sets: List[ResultSet] = []
        while True:
            if self.has_result_set(cursor):
                columns = self.columns(cursor)
                result_sets.append(ResultSet(columns, await self.fetchall(cursor)))
            if not await self.next_result_set(cursor):
                return result_sets

    async def close_cursor(self, cursor: Any) -> None:
        await self._close(cursor)

    async def aclose(self) -> None:
        """Async release/close underlying connection."""

        if self._closed:
            return
        self._closed = True
        try:
            await self._close(self.conn)
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=False)

    async def __aenter__(self) -> AsyncDatabase:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.aclose()


async def _open_on(
    executor: Executor,
    connector: Connector,
    connection_string: str,
    connect_kwargs: Mapping[str, Any],
) -> Any:
    future = executor.submit(functools.partial(connector, connection_string, **connect_kwargs))
    try:
        return await asyncio.wrap_future(future)
    except asyncio.CancelledError:
        # The worker may still finish connecting after the caller gave up.
        future.add_done_callback(_close_abandoned)
        raise


def _close_abandoned(future: Future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    close = getattr(future.result(), "close", None)
    if callable(close):
        close()
