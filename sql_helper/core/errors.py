"""Error taxonomy raised by `SqlHelper` operations."""

from __future__ import annotations


class SqlHelperError(Exception):
    """Base class for every error raised by the helper."""


class ConfigurationError(SqlHelperError):
    """Raised when an operation runs on a helper without a connection string."""


class ExecutionError(SqlHelperError):
    """Raised when the driver fails to connect to or execute a command.

    The original driver exception is available as `__cause__`.
    """

    def __init__(self, command: str, cause: BaseException, *, kind: str = "SQL query"):
        self.command = command
        self.kind = kind
        super().__init__(f"Error executing {kind} '{command}': {cause}")


class MappingError(SqlHelperError):
    """Raised when a caller-supplied row mapper fails for one row."""

    def __init__(self, command: str, row_index: int, cause: BaseException):
        self.command = command
        self.row_index = row_index
        super().__init__(f"failed mapping row {row_index} of '{command}': {cause}")
