"""Query pagination and error handling with SqlHelper on SQLite."""

from __future__ import annotations

import asyncio
import sqlite3
import sys
import tempfile
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "sql_helper").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sql_helper import (
    ConfigurationError,
    ExecutionError,
    MappingError,
    SQLiteDialect,
    SqlHelper,
)


async def main() -> None:
    unconfigured = SqlHelper(sqlite3.connect, SQLiteDialect())
    try:
        await unconfigured.execute_query("SELECT 1")
    except ConfigurationError as exc:
        print("configuration error:", exc)

    with tempfile.TemporaryDirectory() as tmpdir:
        helper = unconfigured.configure(str(Path(tmpdir) / "clinic.db"))
        await helper.execute_query("CREATE TABLE Doctor (Id INTEGER PRIMARY KEY, Name TEXT)")
        for index in range(1, 6):
            await helper.execute_query(
                "INSERT INTO Doctor (Name) VALUES (@Name)", {"@Name": f"Doctor {index}"}
            )

        # Page 2 of 3 with two records per page.
        page = await helper.execute_query_paginated(
            "SELECT Id, Name FROM Doctor",
            "SELECT COUNT(*) FROM Doctor",
            page_number=2,
            page_size=2,
            map_row=lambda row: row.get_str("Name"),
        )
        print(
            "page:",
            page.data,
            f"{page.page_number}/{page.total_pages}",
            "next:",
            page.has_next_page,
            "previous:",
            page.has_previous_page,
        )

        try:
            await helper.execute_query_list("SELECT * FROM MissingTable")
        except ExecutionError as exc:
            print("execution error:", exc)

        try:
            await helper.execute_query_list(
                "SELECT Id FROM Doctor ORDER BY Id", None, lambda row: row.get_str("Name")
            )
        except MappingError as exc:
            print("mapping error at row", exc.row_index, "->", exc.__cause__)

        try:
            await helper.execute_query_paginated("SELECT Id FROM Doctor", "SELECT COUNT(*) FROM Doctor", 0, 10)
        except ValueError as exc:
            print("invalid page:", exc)


if __name__ == "__main__":
    asyncio.run(main())
