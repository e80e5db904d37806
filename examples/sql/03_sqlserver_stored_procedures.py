"""Stored procedures on SQL Server through aioodbc.

Requires `pip install sql-helper[mssql]`, an ODBC driver, and a reachable
server. Example:
    SQLHELPER_MSSQL_DSN="Driver={ODBC Driver 18 for SQL Server};Server=localhost;\
Database=clinic;UID=sa;PWD=...;TrustServerCertificate=yes" \
    python examples/sql/03_sqlserver_stored_procedures.py

The procedures used below are expected to exist:
    sp_GetDoctors, sp_GetDoctorById @Id, sp_InsertDoctor @Name, @Specialty,
    sp_GetDoctorsPaged @PageNumber, @PageSize, @TotalRecords OUTPUT
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "sql_helper").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sql_helper import DbType, Row, SQLServerDialect, SqlHelper, aioodbc_connector


def doctor_name(row: Row) -> str:
    return row.get_str("Name")


async def main() -> None:
    dsn = os.getenv("SQLHELPER_MSSQL_DSN")
    if not dsn:
        print("Set SQLHELPER_MSSQL_DSN to run this example.")
        return

    logging.basicConfig(level=logging.DEBUG)
    helper = SqlHelper(aioodbc_connector(), SQLServerDialect()).configure(dsn)

    ok = await helper.execute_stored_procedure(
        "sp_InsertDoctor", {"@Name": "New Doctor", "@Specialty": None}
    )
    print("inserted:", ok)

    print("all:", await helper.execute_stored_procedure_list("sp_GetDoctors", None, doctor_name))
    print("by id:", await helper.execute_stored_procedure_single("sp_GetDoctorById", {"@Id": 1}, doctor_name))

    output = await helper.execute_stored_procedure_with_output(
        "sp_GetDoctorsPaged",
        {"@PageNumber": 1, "@PageSize": 5},
        {"@TotalRecords": DbType.INT},
        doctor_name,
    )
    print("output:", output.data, output.output_parameters)

    page = await helper.execute_stored_procedure_paginated(
        "sp_GetDoctorsPaged", page_number=1, page_size=2, map_row=doctor_name
    )
    print("page:", page.data, "of", page.total_pages, "pages")


if __name__ == "__main__":
    asyncio.run(main())
