"""Pagination envelope shared by every listing."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any


def total_pages_for(total: int, page_size: int) -> int:
    """ceil(total / page_size); zero records means zero pages."""
    if total <= 0:
        return 0
    return math.ceil(total / page_size)


@dataclass(frozen=True)
class Pagination:
    page: int
    page_size: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> Pagination:
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages_for(total, page_size),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "total": self.total,
            "totalPages": self.total_pages,
        }


@dataclass
class Paginated:
    """A page of results plus its pagination metadata."""

    data: list[Any] = field(default_factory=list)
    pagination: Pagination = field(default_factory=lambda: Pagination.build(1, 20, 0))

    @classmethod
    def empty(cls, page: int, page_size: int) -> Paginated:
        return cls(data=[], pagination=Pagination.build(page, page_size, 0))

    def to_dict(self) -> dict[str, Any]:
        return {"data": list(self.data), "pagination": self.pagination.to_dict()}
