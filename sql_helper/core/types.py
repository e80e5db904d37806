"""Shared core type aliases used across contracts, helper, and ports."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar, Union

from .rows import Row

T = TypeVar("T")

QueryParams = Optional[Mapping[str, Any]]
NamedParams = Dict[str, Any]
PositionalParams = List[Any]
DriverParams = Union[NamedParams, PositionalParams, None]

RowMapper = Callable[[Row], T]
