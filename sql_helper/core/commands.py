"""Command model and parameter binding shared by the helper and dialects."""

from __future__ import annotations

import datetime
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, List, Mapping, Optional, Tuple

from .types import DriverParams, QueryParams


class CommandType(str, Enum):
    """How the command text is interpreted by the database."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"


class ParameterDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class DbType(str, Enum):
    """Scalar type tags accepted for output parameters."""

    INT = "int"
    BIGINT = "bigint"
    SMALLINT = "smallint"
    TINYINT = "tinyint"
    BIT = "bit"
    DECIMAL = "decimal"
    MONEY = "money"
    FLOAT = "float"
    REAL = "real"
    NVARCHAR = "nvarchar"
    VARCHAR = "varchar"
    DATE = "date"
    DATETIME = "datetime"
    DATETIME2 = "datetime2"
    UNIQUEIDENTIFIER = "uniqueidentifier"


DbTypeInput = DbType | str | type

_DB_TYPE_ALIASES = {
    "integer": DbType.INT,
    "int32": DbType.INT,
    "int64": DbType.BIGINT,
    "long": DbType.BIGINT,
    "bool": DbType.BIT,
    "boolean": DbType.BIT,
    "double": DbType.FLOAT,
    "numeric": DbType.DECIMAL,
    "str": DbType.NVARCHAR,
    "string": DbType.NVARCHAR,
    "text": DbType.NVARCHAR,
    "uuid": DbType.UNIQUEIDENTIFIER,
    "guid": DbType.UNIQUEIDENTIFIER,
}

_PY_TYPE_MAP = {
    bool: DbType.BIT,
    int: DbType.INT,
    float: DbType.FLOAT,
    Decimal: DbType.DECIMAL,
    str: DbType.NVARCHAR,
    datetime.datetime: DbType.DATETIME2,
    datetime.date: DbType.DATE,
    uuid.UUID: DbType.UNIQUEIDENTIFIER,
}


def normalize_db_type(db_type: DbTypeInput) -> DbType:
    """Normalize a type tag, alias, or Python type into a `DbType` value."""

    if isinstance(db_type, DbType):
        return db_type
    if isinstance(db_type, type):
        normalized = _PY_TYPE_MAP.get(db_type)
        if normalized is None:
            raise ValueError(f"Unsupported output parameter type: {db_type.__name__}")
        return normalized
    if isinstance(db_type, str):
        key = db_type.strip().lower()
        if key in DbType._value2member_map_:
            return DbType(key)
        if key in _DB_TYPE_ALIASES:
            return _DB_TYPE_ALIASES[key]
        allowed = sorted(set(DbType._value2member_map_) | set(_DB_TYPE_ALIASES))
        raise ValueError(f"Unsupported output parameter type: {db_type}. Supported: {allowed}")
    raise ValueError(f"Unsupported output parameter type: {type(db_type).__name__}")


def parameter_key(name: str) -> str:
    """Return the parameter name without its `@` prefix."""

    return name[1:] if name.startswith("@") else name


@dataclass(frozen=True)
class Parameter:
    """One named parameter attached to a command."""

    name: str
    value: Any = None
    direction: ParameterDirection = ParameterDirection.INPUT
    db_type: Optional[DbType] = None

    @property
    def key(self) -> str:
        return parameter_key(self.name)


@dataclass
class Command:
    """SQL text or stored procedure name plus its bound parameters."""

    text: str
    command_type: CommandType = CommandType.TEXT
    parameters: List[Parameter] = field(default_factory=list)

    @property
    def is_stored_procedure(self) -> bool:
        return self.command_type is CommandType.STORED_PROCEDURE

    @property
    def input_parameters(self) -> List[Parameter]:
        return [p for p in self.parameters if p.direction is ParameterDirection.INPUT]

    @property
    def output_parameters(self) -> List[Parameter]:
        return [p for p in self.parameters if p.direction is ParameterDirection.OUTPUT]


def bind_parameters(command: Command, parameters: QueryParams) -> None:
    """Attach input parameters to `command` in mapping insertion order.

    `None` values bind SQL NULL. Duplicate names are passed through to the
    driver untouched.
    """

    if not parameters:
        return
    for name, value in parameters.items():
        command.parameters.append(Parameter(name=name, value=value))


def bind_output_parameters(
    command: Command, output_parameters: Optional[Mapping[str, DbTypeInput]]
) -> None:
    """Attach one output-direction parameter per declared name and type."""

    if not output_parameters:
        return
    for name, db_type in output_parameters.items():
        command.parameters.append(
            Parameter(
                name=name,
                direction=ParameterDirection.OUTPUT,
                db_type=normalize_db_type(db_type),
            )
        )


@dataclass(frozen=True)
class CompiledCommand:
    """Driver-ready SQL with its parameters in the dialect's paramstyle.

    When `output_names` is not empty the SQL ends with a result set holding
    one column per output parameter, in declaration order.
    """

    sql: str
    params: DriverParams = None
    output_names: Tuple[str, ...] = ()
