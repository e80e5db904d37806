"""Basic SqlHelper usage against a SQLite file."""

from __future__ import annotations

import asyncio
import sqlite3
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "sql_helper").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sql_helper import Row, SQLiteDialect, SqlHelper


@dataclass
class Doctor:
    id: int
    name: str
    specialty: Optional[str]


def map_doctor(row: Row) -> Doctor:
    return Doctor(
        id=row.get_int("Id"),
        name=row.get_str("Name"),
        specialty=row.get_field_value("Specialty", str),
    )


async def main() -> None:
    with tempfile.TemporaryDirectory() as tmpdir:
        path = str(Path(tmpdir) / "clinic.db")

        # 1) Configure once at startup; the helper opens a connection per call.
        helper = SqlHelper(sqlite3.connect, SQLiteDialect()).configure(path)

        await helper.execute_query(
            "CREATE TABLE Doctor (Id INTEGER PRIMARY KEY, Name TEXT NOT NULL, Specialty TEXT NULL)"
        )

        # 2) Non-query commands return the affected-row count.
        for name, specialty in (("Juan Perez", "Cardiology"), ("Maria Lopez", None)):
            affected = await helper.execute_query(
                "INSERT INTO Doctor (Name, Specialty) VALUES (@Name, @Specialty)",
                {"@Name": name, "@Specialty": specialty},
            )
            print("inserted:", affected)

        # 3) Map every row, or just the first one.
        doctors = await helper.execute_query_list("SELECT * FROM Doctor ORDER BY Id", None, map_doctor)
        print("doctors:", doctors)

        first = await helper.execute_query_single(
            "SELECT * FROM Doctor WHERE Id = @Id", {"@Id": 1}, map_doctor
        )
        print("doctor 1:", first)

        # 4) Without a mapper rows come back as `Row` objects.
        tables = await helper.execute_query_multiple_tables("SELECT COUNT(*) AS Total FROM Doctor")
        print("total:", tables[0].rows[0]["Total"])


if __name__ == "__main__":
    asyncio.run(main())
