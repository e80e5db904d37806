"""Concrete SQL dialect implementations for DB-API drivers."""

from __future__ import annotations

import re
from typing import List

from ...core.commands import Command, CompiledCommand, DbType, Parameter

# Tokens that must never be rewritten (string literals, quoted identifiers,
# comments, `@@system` variables) are matched alongside `@name` references
# and the driver's own placeholders (`?`, `%s`, `%(name)s`, `:name`).
_TOKEN_RE = re.compile(
    r"'(?:[^']|'')*'"
    r"|\[[^\]]*\]"
    r'|"[^"]*"'
    r"|--[^\n]*"
    r"|/\*.*?\*/"
    r"|@@?[A-Za-z_][\w@$#]*"
    r"|\?|%s|%\(\w+\)s"
    r"|(?<![:\w]):[A-Za-z_]\w*",
    re.DOTALL,
)

_NATIVE_MARKER_START = ("?", "%", ":")


class Dialect:
    """Base dialect that defines placeholder, procedure, and paging SQL."""

    name: str = "generic"
    paramstyle: str = "named"
    quote_char: str = '"'
    supports_stored_procedures: bool = False

    def q(self, ident: str) -> str:
        """Quote SQL identifier."""

        return f"{self.quote_char}{ident}{self.quote_char}"

    def placeholder(self, key: str) -> str:
        """Return parameter placeholder for current param style."""

        if self.paramstyle == "named":
            return f":{key}"
        if self.paramstyle == "pyformat":
            return f"%({key})s"
        if self.paramstyle == "qmark":
            return "?"
        if self.paramstyle == "format":
            return "%s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")

    def compile(self, command: Command) -> CompiledCommand:
        """Render a bound command into driver SQL and driver parameters."""

        if command.is_stored_procedure:
            if not self.supports_stored_procedures:
                raise NotImplementedError(
                    f"{self.name} dialect does not support stored procedures."
                )
            return self.compile_procedure(command)
        return self.compile_text(command)

    def compile_text(self, command: Command) -> CompiledCommand:
        """Rewrite `@name` references in SQL text to driver placeholders.

        Unbound `@locals` are left as written and bound parameters the text
        never references are not sent. When the text holds no `@name`
        reference but does use the driver's native placeholders, every value
        is passed in binding order.
        """

        if command.output_parameters:
            raise ValueError("Output parameters require a stored procedure command.")
        inputs = command.input_parameters
        if not inputs:
            return CompiledCommand(command.text)

        by_key: dict[str, Parameter] = {}
        by_folded_key: dict[str, Parameter] = {}
        for param in inputs:
            by_key.setdefault(param.key, param)
            by_folded_key.setdefault(param.key.lower(), param)

        referenced: List[Parameter] = []
        native = False

        def _replace(match: re.Match[str]) -> str:
            nonlocal native
            token = match.group(0)
            if token.startswith(_NATIVE_MARKER_START):
                native = True
                return token
            if not token.startswith("@") or token.startswith("@@"):
                return token
            param = by_key.get(token[1:]) or by_folded_key.get(token[1:].lower())
            if param is None:
                return token
            referenced.append(param)
            return self.placeholder(param.key)

        sql = _TOKEN_RE.sub(_replace, command.text)
        if native and not referenced:
            referenced = list(inputs)
        if not referenced:
            return CompiledCommand(sql)
        if self.paramstyle in {"named", "pyformat"}:
            if native:
                return CompiledCommand(sql, {p.key: p.value for p in inputs})
            return CompiledCommand(sql, {p.key: p.value for p in referenced})
        return CompiledCommand(sql, [p.value for p in referenced])

    def compile_procedure(self, command: Command) -> CompiledCommand:
        raise NotImplementedError(f"{self.name} dialect does not support stored procedures.")

    def paginate(self, base_query: str, offset: int, limit: int) -> str:
        """Append an offset/fetch window ordered by the first projected column."""

        return (
            f"{_strip_terminator(base_query)} ORDER BY 1 "
            f"OFFSET {int(offset)} ROWS FETCH NEXT {int(limit)} ROWS ONLY"
        )

    def output_type_sql(self, db_type: DbType) -> str:
        return db_type.value.upper()


class SQLServerDialect(Dialect):
    """SQL Server dialect (`?` parameters for pyodbc/aioodbc, `EXEC` procedures).

    Output parameters are captured into declared locals and selected as the
    batch's trailing result set, since ODBC drivers do not expose them.
    """

    name = "mssql"
    paramstyle = "qmark"
    quote_char = "["
    supports_stored_procedures = True

    _TYPE_SQL = {
        DbType.NVARCHAR: "NVARCHAR(MAX)",
        DbType.VARCHAR: "VARCHAR(MAX)",
        DbType.DECIMAL: "DECIMAL(38, 10)",
    }

    def q(self, ident: str) -> str:
        return "[" + ident.replace("]", "]]") + "]"

    def procedure_name(self, name: str) -> str:
        """Bracket each part of a possibly schema-qualified procedure name."""

        parts = [part.strip() for part in name.strip().split(".")]
        return ".".join(part if part.startswith("[") else self.q(part) for part in parts)

    def output_type_sql(self, db_type: DbType) -> str:
        return self._TYPE_SQL.get(db_type, db_type.value.upper())

    def compile_procedure(self, command: Command) -> CompiledCommand:
        inputs = command.input_parameters
        outputs = command.output_parameters
        proc = self.procedure_name(command.text)
        args = [f"@{p.key} = {self.placeholder(p.key)}" for p in inputs]
        values = [p.value for p in inputs]

        if not outputs:
            sql = f"EXEC {proc} {', '.join(args)}" if args else f"EXEC {proc}"
            return CompiledCommand(sql, values)

        lines = ["SET NOCOUNT ON;"]
        for index, param in enumerate(outputs):
            lines.append(f"DECLARE @__out{index} {self.output_type_sql(param.db_type)};")
            args.append(f"@{param.key} = @__out{index} OUTPUT")
        lines.append(f"EXEC {proc} {', '.join(args)};")
        selected = ", ".join(
            f"@__out{index} AS {self.q(param.key)}" for index, param in enumerate(outputs)
        )
        lines.append(f"SELECT {selected};")
        return CompiledCommand("\n".join(lines), values, tuple(p.name for p in outputs))


class PostgresDialect(Dialect):
    """PostgreSQL dialect (`%s` positional parameters, `CALL` procedures).

    `CALL` returns one row holding the procedure's OUT/INOUT values, which
    serves as the trailing output result set.
    """

    name = "postgres"
    paramstyle = "format"
    quote_char = '"'
    supports_stored_procedures = True

    def output_type_sql(self, db_type: DbType) -> str:
        return {
            DbType.INT: "integer",
            DbType.TINYINT: "smallint",
            DbType.BIT: "boolean",
            DbType.DECIMAL: "numeric",
            DbType.MONEY: "numeric",
            DbType.FLOAT: "double precision",
            DbType.NVARCHAR: "text",
            DbType.VARCHAR: "text",
            DbType.DATETIME: "timestamp",
            DbType.DATETIME2: "timestamp",
            DbType.UNIQUEIDENTIFIER: "uuid",
        }.get(db_type, db_type.value)

    def compile_procedure(self, command: Command) -> CompiledCommand:
        inputs = command.input_parameters
        outputs = command.output_parameters
        args = [f"{p.key} => {self.placeholder(p.key)}" for p in inputs]
        args += [f"{p.key} => NULL::{self.output_type_sql(p.db_type)}" for p in outputs]
        sql = f"CALL {command.text.strip()}({', '.join(args)})"
        return CompiledCommand(sql, [p.value for p in inputs], tuple(p.name for p in outputs))


class SQLiteDialect(Dialect):
    """SQLite dialect (`:name` parameters, no stored procedures)."""

    name = "sqlite"
    paramstyle = "named"
    quote_char = '"'
    supports_stored_procedures = False

    def paginate(self, base_query: str, offset: int, limit: int) -> str:
        return f"{_strip_terminator(base_query)} ORDER BY 1 LIMIT {int(limit)} OFFSET {int(offset)}"


def _strip_terminator(sql: str) -> str:
    return sql.rstrip().rstrip(";").rstrip()
