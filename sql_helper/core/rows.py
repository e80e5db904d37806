"""Row read capability handed to row mappers, and raw result sets."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Type, TypeVar, Union

V = TypeVar("V")

ColumnKey = Union[int, str]

_TRUE_STRINGS = {"1", "true", "t", "yes", "y"}
_FALSE_STRINGS = {"0", "false", "f", "no", "n"}


def _convert(value: Any, as_type: Optional[Type[Any]]) -> Any:
    if value is None or as_type is None:
        return value
    if as_type is bool:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"Cannot convert {value!r} to bool")
        return bool(value)
    if isinstance(value, as_type) and not (isinstance(value, bool) and as_type is not bool):
        return value
    if as_type is Decimal and isinstance(value, float):
        return Decimal(str(value))
    return as_type(value)


class Row:
    """Read-only view of one result row, addressable by index or column name.

    Column name lookups are exact first and then case-insensitive, matching
    how SQL Server resolves identifiers.
    """

    __slots__ = ("_columns", "_values", "_index", "_folded_index")

    def __init__(self, columns: Sequence[str], values: Sequence[Any]):
        if len(columns) != len(values):
            raise ValueError(
                f"Row has {len(values)} values but {len(columns)} columns were described."
            )
        self._columns: Tuple[str, ...] = tuple(columns)
        self._values: Tuple[Any, ...] = tuple(values)
        self._index: Dict[str, int] = {}
        self._folded_index: Dict[str, int] = {}
        for position, name in enumerate(self._columns):
            self._index.setdefault(name, position)
            self._folded_index.setdefault(name.lower(), position)

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    def _position(self, key: ColumnKey) -> int:
        if isinstance(key, bool):
            raise TypeError("Column key must be an int index or str name.")
        if isinstance(key, int):
            if -len(self._values) <= key < len(self._values):
                return key
            raise IndexError(f"Column index out of range: {key}")
        if isinstance(key, str):
            position = self._index.get(key)
            if position is None:
                position = self._folded_index.get(key.lower())
            if position is None:
                raise KeyError(f"Column not found: {key}")
            return position
        raise TypeError("Column key must be an int index or str name.")

    def __getitem__(self, key: ColumnKey) -> Any:
        return self._values[self._position(key)]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        return name in self._index or name.lower() in self._folded_index

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._columns == other._columns and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._columns, self._values))

    def __repr__(self) -> str:
        return f"Row({self.as_dict()!r})"

    def keys(self) -> Tuple[str, ...]:
        return self._columns

    def as_dict(self) -> Dict[str, Any]:
        """Return column/value pairs; the first column wins on duplicate names."""

        result: Dict[str, Any] = {}
        for name, value in zip(self._columns, self._values):
            result.setdefault(name, value)
        return result

    def is_null(self, key: ColumnKey) -> bool:
        return self[key] is None

    def get(self, key: ColumnKey, as_type: Optional[Type[V]] = None) -> Any:
        """Read one column, optionally converting it to `as_type`.

        NULL is returned as `None` regardless of `as_type`.
        """

        return _convert(self[key], as_type)

    def get_field_value(
        self, name: str, as_type: Optional[Type[V]] = None, default: Any = None
    ) -> Any:
        """Read a column by name, returning `default` when missing or NULL."""

        if name not in self:
            return default
        value = self[name]
        if value is None:
            return default
        return _convert(value, as_type)

    def _require(self, key: ColumnKey, as_type: Type[V]) -> V:
        value = self[key]
        if value is None:
            raise TypeError(f"Column {key!r} is NULL; cannot read as {as_type.__name__}.")
        return _convert(value, as_type)

    def get_int(self, key: ColumnKey) -> int:
        return self._require(key, int)

    def get_str(self, key: ColumnKey) -> str:
        return self._require(key, str)

    def get_float(self, key: ColumnKey) -> float:
        return self._require(key, float)

    def get_bool(self, key: ColumnKey) -> bool:
        return self._require(key, bool)

    def get_decimal(self, key: ColumnKey) -> Decimal:
        return self._require(key, Decimal)


@dataclass(frozen=True)
class ResultSet:
    """One raw result set returned by a multi-table command."""

    columns: Tuple[str, ...] = ()
    rows: List[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)
