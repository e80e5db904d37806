"""Result containers returned by output-parameter and paginated calls."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SqlOutputResult(Generic[T]):
    """Mapped rows plus the output parameter values of a stored procedure."""

    data: List[T] = field(default_factory=list)
    output_parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PagedResult(Generic[T]):
    """One page of mapped rows with paging metadata.

    `total_pages`, `has_next_page` and `has_previous_page` are derived from
    the stored fields and cannot be set independently.
    """

    data: List[T]
    page_number: int
    page_size: int
    total_records: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_records / self.page_size)

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1
