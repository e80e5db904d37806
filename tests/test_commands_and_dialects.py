from __future__ import annotations

import datetime
import unittest
import uuid
from decimal import Decimal

from sql_helper.core.commands import (
    Command,
    CommandType,
    DbType,
    ParameterDirection,
    bind_output_parameters,
    bind_parameters,
    normalize_db_type,
)
from sql_helper.ports.db_api.dialects import (
    Dialect,
    PostgresDialect,
    SQLiteDialect,
    SQLServerDialect,
)


class _QmarkDialect(Dialect):
    paramstyle = "qmark"


class _PyformatDialect(Dialect):
    paramstyle = "pyformat"


class _InvalidDialect(Dialect):
    paramstyle = "invalid"


def _text(sql: str, params: dict | None = None) -> Command:
    command = Command(sql)
    bind_parameters(command, params)
    return command


class ParameterBindingTests(unittest.TestCase):
    def test_bind_parameters_keeps_insertion_order_and_nulls(self) -> None:
        command = Command("sp_InsertDoctor", CommandType.STORED_PROCEDURE)
        bind_parameters(command, {"@Name": "Ana", "@Specialty": None, "Age": 40})

        self.assertEqual([p.name for p in command.parameters], ["@Name", "@Specialty", "Age"])
        self.assertEqual([p.key for p in command.parameters], ["Name", "Specialty", "Age"])
        self.assertIsNone(command.parameters[1].value)
        self.assertTrue(
            all(p.direction is ParameterDirection.INPUT for p in command.parameters)
        )

    def test_bind_parameters_accepts_none_and_empty(self) -> None:
        command = Command("SELECT 1")
        bind_parameters(command, None)
        bind_parameters(command, {})
        self.assertEqual(command.parameters, [])

    def test_bind_parameters_does_not_deduplicate(self) -> None:
        command = Command("SELECT 1")
        bind_parameters(command, {"@Id": 1})
        bind_parameters(command, {"@Id": 2})
        self.assertEqual([p.value for p in command.parameters], [1, 2])

    def test_bind_output_parameters_appends_output_direction(self) -> None:
        command = Command("sp_Count", CommandType.STORED_PROCEDURE)
        bind_parameters(command, {"@Filter": "x"})
        bind_output_parameters(command, {"@Total": "int", "@Label": str})

        self.assertEqual([p.name for p in command.input_parameters], ["@Filter"])
        outputs = command.output_parameters
        self.assertEqual([p.name for p in outputs], ["@Total", "@Label"])
        self.assertEqual([p.db_type for p in outputs], [DbType.INT, DbType.NVARCHAR])


class DbTypeTests(unittest.TestCase):
    def test_normalize_tags_aliases_and_python_types(self) -> None:
        self.assertIs(normalize_db_type(DbType.BIGINT), DbType.BIGINT)
        self.assertIs(normalize_db_type(" INT "), DbType.INT)
        self.assertIs(normalize_db_type("integer"), DbType.INT)
        self.assertIs(normalize_db_type("string"), DbType.NVARCHAR)
        self.assertIs(normalize_db_type("guid"), DbType.UNIQUEIDENTIFIER)
        self.assertIs(normalize_db_type(bool), DbType.BIT)
        self.assertIs(normalize_db_type(int), DbType.INT)
        self.assertIs(normalize_db_type(Decimal), DbType.DECIMAL)
        self.assertIs(normalize_db_type(datetime.datetime), DbType.DATETIME2)
        self.assertIs(normalize_db_type(datetime.date), DbType.DATE)
        self.assertIs(normalize_db_type(uuid.UUID), DbType.UNIQUEIDENTIFIER)

    def test_unknown_type_raises(self) -> None:
        with self.assertRaises(ValueError):
            normalize_db_type("geography")
        with self.assertRaises(ValueError):
            normalize_db_type(list)
        with self.assertRaises(ValueError):
            normalize_db_type(3)  # type: ignore[arg-type]


class DialectTests(unittest.TestCase):
    def test_builtin_dialect_placeholders(self) -> None:
        self.assertEqual(SQLiteDialect().placeholder("x"), ":x")
        self.assertEqual(SQLServerDialect().placeholder("x"), "?")
        self.assertEqual(PostgresDialect().placeholder("x"), "%s")
        self.assertEqual(_PyformatDialect().placeholder("x"), "%(x)s")

    def test_invalid_paramstyle_raises(self) -> None:
        with self.assertRaises(ValueError):
            _InvalidDialect().placeholder("x")

    def test_text_without_parameters_passes_sql_through(self) -> None:
        compiled = SQLServerDialect().compile(_text("SELECT * FROM Doctor"))
        self.assertEqual(compiled.sql, "SELECT * FROM Doctor")
        self.assertIsNone(compiled.params)
        self.assertEqual(compiled.output_names, ())

    def test_qmark_rewrites_references_in_occurrence_order(self) -> None:
        compiled = SQLServerDialect().compile(
            _text(
                "SELECT * FROM Doctor WHERE Name = @Name OR Id = @Id OR Alias = @name",
                {"@Id": 7, "@Name": "Ana"},
            )
        )
        self.assertEqual(
            compiled.sql, "SELECT * FROM Doctor WHERE Name = ? OR Id = ? OR Alias = ?"
        )
        self.assertEqual(compiled.params, ["Ana", 7, "Ana"])

    def test_named_dialect_uses_colon_names_and_dict(self) -> None:
        compiled = SQLiteDialect().compile(
            _text("SELECT * FROM Doctor WHERE Id = @Id", {"@Id": 3})
        )
        self.assertEqual(compiled.sql, "SELECT * FROM Doctor WHERE Id = :Id")
        self.assertEqual(compiled.params, {"Id": 3})

    def test_literals_comments_and_system_variables_are_untouched(self) -> None:
        sql = (
            "SELECT '@Id', [@Id], @@ROWCOUNT, @Local -- @Id\n"
            "/* @Id */ FROM Doctor WHERE Id = @Id AND Note = 'it''s @Id'"
        )
        compiled = _QmarkDialect().compile(_text(sql, {"Id": 1}))
        self.assertEqual(
            compiled.sql,
            "SELECT '@Id', [@Id], @@ROWCOUNT, @Local -- @Id\n"
            "/* @Id */ FROM Doctor WHERE Id = ? AND Note = 'it''s @Id'",
        )
        self.assertEqual(compiled.params, [1])

    def test_native_placeholders_receive_values_in_binding_order(self) -> None:
        compiled = SQLServerDialect().compile(
            _text("SELECT * FROM Doctor WHERE Id = ? AND Name = ?", {"a": 1, "b": "x"})
        )
        self.assertEqual(compiled.params, [1, "x"])

    def test_unreferenced_parameters_are_not_sent(self) -> None:
        for dialect in (SQLServerDialect(), PostgresDialect(), SQLiteDialect()):
            with self.subTest(dialect=dialect.name):
                compiled = dialect.compile(
                    _text("SELECT COUNT(*) FROM Doctor", {"@Specialty": "Neurology"})
                )
                self.assertEqual(compiled.sql, "SELECT COUNT(*) FROM Doctor")
                self.assertIsNone(compiled.params)

    def test_only_referenced_parameters_are_sent(self) -> None:
        params = {"@Specialty": "Neurology", "@MinId": 2}
        sql = "SELECT * FROM Doctor WHERE Id > @MinId"

        self.assertEqual(SQLServerDialect().compile(_text(sql, params)).params, [2])
        self.assertEqual(SQLiteDialect().compile(_text(sql, params)).params, {"MinId": 2})

    def test_markers_inside_literals_are_not_native_placeholders(self) -> None:
        compiled = SQLServerDialect().compile(
            _text("SELECT '?' AS Mark, ':x' AS Label FROM Doctor", {"a": 1})
        )
        self.assertIsNone(compiled.params)

    def test_double_colon_casts_are_not_named_placeholders(self) -> None:
        compiled = SQLiteDialect().compile(_text("SELECT '1'::text AS v", {"a": 1}))
        self.assertIsNone(compiled.params)

    def test_text_with_output_parameters_raises(self) -> None:
        command = Command("SELECT 1")
        bind_output_parameters(command, {"@Total": DbType.INT})
        with self.assertRaises(ValueError):
            SQLServerDialect().compile(command)

    def test_sqlserver_procedure_without_outputs(self) -> None:
        command = Command("dbo.sp_GetDoctorById", CommandType.STORED_PROCEDURE)
        bind_parameters(command, {"@Id": 1, "Active": None})
        compiled = SQLServerDialect().compile(command)

        self.assertEqual(compiled.sql, "EXEC [dbo].[sp_GetDoctorById] @Id = ?, @Active = ?")
        self.assertEqual(compiled.params, [1, None])
        self.assertEqual(compiled.output_names, ())

    def test_sqlserver_procedure_without_parameters(self) -> None:
        compiled = SQLServerDialect().compile(
            Command("[dbo].[sp_GetDoctors]", CommandType.STORED_PROCEDURE)
        )
        self.assertEqual(compiled.sql, "EXEC [dbo].[sp_GetDoctors]")
        self.assertEqual(compiled.params, [])

    def test_sqlserver_procedure_with_outputs_selects_trailing_row(self) -> None:
        command = Command("sp_GetDoctorsPaged", CommandType.STORED_PROCEDURE)
        bind_parameters(command, {"@PageNumber": 1, "@PageSize": 2})
        bind_output_parameters(command, {"@TotalRecords": DbType.INT, "@Label": "nvarchar"})
        compiled = SQLServerDialect().compile(command)

        self.assertEqual(
            compiled.sql,
            "SET NOCOUNT ON;\n"
            "DECLARE @__out0 INT;\n"
            "DECLARE @__out1 NVARCHAR(MAX);\n"
            "EXEC [sp_GetDoctorsPaged] @PageNumber = ?, @PageSize = ?, "
            "@TotalRecords = @__out0 OUTPUT, @Label = @__out1 OUTPUT;\n"
            "SELECT @__out0 AS [TotalRecords], @__out1 AS [Label];",
        )
        self.assertEqual(compiled.params, [1, 2])
        self.assertEqual(compiled.output_names, ("@TotalRecords", "@Label"))

    def test_postgres_procedure_uses_call_with_named_notation(self) -> None:
        command = Command("get_doctors_paged", CommandType.STORED_PROCEDURE)
        bind_parameters(command, {"@PageNumber": 2, "@PageSize": 5})
        bind_output_parameters(command, {"@TotalRecords": DbType.INT})
        compiled = PostgresDialect().compile(command)

        self.assertEqual(
            compiled.sql,
            "CALL get_doctors_paged(PageNumber => %s, PageSize => %s, "
            "TotalRecords => NULL::integer)",
        )
        self.assertEqual(compiled.params, [2, 5])
        self.assertEqual(compiled.output_names, ("@TotalRecords",))

    def test_sqlite_has_no_stored_procedures(self) -> None:
        with self.assertRaises(NotImplementedError):
            SQLiteDialect().compile(Command("sp_GetDoctors", CommandType.STORED_PROCEDURE))

    def test_paginate_windows(self) -> None:
        self.assertEqual(
            SQLServerDialect().paginate("SELECT Id, Name FROM Doctor;", 2, 2),
            "SELECT Id, Name FROM Doctor ORDER BY 1 OFFSET 2 ROWS FETCH NEXT 2 ROWS ONLY",
        )
        self.assertEqual(
            SQLiteDialect().paginate("SELECT Id FROM Doctor", 20, 10),
            "SELECT Id FROM Doctor ORDER BY 1 LIMIT 10 OFFSET 20",
        )

    def test_output_type_sql(self) -> None:
        mssql = SQLServerDialect()
        self.assertEqual(mssql.output_type_sql(DbType.DECIMAL), "DECIMAL(38, 10)")
        self.assertEqual(mssql.output_type_sql(DbType.BIGINT), "BIGINT")
        self.assertEqual(PostgresDialect().output_type_sql(DbType.BIT), "boolean")


if __name__ == "__main__":
    unittest.main()
