"""Immutable connection configuration held by one `SqlHelper`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def validate_connection_string(connection_string: Any) -> str:
    """Return the descriptor unchanged or raise `ValueError` when blank."""

    if not isinstance(connection_string, str):
        raise ValueError("connection_string must be a string.")
    if not connection_string.strip():
        raise ValueError("connection_string must not be empty.")
    return connection_string


@dataclass(frozen=True)
class SqlHelperConfig:
    """Connection descriptor plus extra keyword arguments for the connector."""

    connection_string: Optional[str] = None
    connect_kwargs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.connection_string is not None:
            validate_connection_string(self.connection_string)
        object.__setattr__(self, "connect_kwargs", dict(self.connect_kwargs))

    @property
    def is_configured(self) -> bool:
        return self.connection_string is not None

    def with_connection_string(self, connection_string: str) -> SqlHelperConfig:
        """Return a copy bound to another connection descriptor."""

        return SqlHelperConfig(
            connection_string=validate_connection_string(connection_string),
            connect_kwargs=self.connect_kwargs,
        )
