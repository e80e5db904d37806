"""Public core API for command execution, row mapping, and paging."""

from .commands import (
    Command,
    CommandType,
    CompiledCommand,
    DbType,
    DbTypeInput,
    Parameter,
    ParameterDirection,
    bind_output_parameters,
    bind_parameters,
    normalize_db_type,
)
from .config import SqlHelperConfig
from .errors import ConfigurationError, ExecutionError, MappingError, SqlHelperError
from .helper import SqlHelper
from .results import PagedResult, SqlOutputResult
from .rows import ResultSet, Row

__all__ = [
    "Command",
    "CommandType",
    "CompiledCommand",
    "DbType",
    "DbTypeInput",
    "Parameter",
    "ParameterDirection",
    "bind_output_parameters",
    "bind_parameters",
    "normalize_db_type",
    "SqlHelperConfig",
    "SqlHelper",
    "SqlHelperError",
    "ConfigurationError",
    "ExecutionError",
    "MappingError",
    "PagedResult",
    "SqlOutputResult",
    "ResultSet",
    "Row",
]
