"""Framework-agnostic pagination contract shared by repositories.

``PageSpec`` describes what the caller wants (sort field, direction,
offset, limit); ``Page`` carries one slice of results plus the total
count.  Sorting is always stable: ties are broken by ``id`` ascending.
"""

from __future__ import annotations

import math
from typing import Generic, Literal, TypeVar

from django.conf import settings
from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

SortField = Literal["id", "name", "price", "version", "created_at", "updated_at"]
SortDirection = Literal["asc", "desc"]

MAX_PAGE_SIZE = 1000


def _default_page_size() -> int:
    return getattr(settings, "DEFAULT_PAGE_SIZE", 10)


class PageSpec(BaseModel):
    """Immutable sort + slice request."""

    model_config = ConfigDict(frozen=True)

    sort_by: SortField = "id"
    direction: SortDirection = "asc"
    offset: int = Field(default=0, ge=0)
    limit: int = Field(default_factory=_default_page_size, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("direction", mode="before")
    @classmethod
    def normalise_direction(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @classmethod
    def of(
        cls,
        page: int = 0,
        size: int | None = None,
        sort_by: str = "id",
        direction: str = "asc",
    ) -> PageSpec:
        """Build a spec from a zero-based page number and page size."""
        size = size if size is not None else _default_page_size()
        if page < 0:
            raise ValueError("Page number cannot be negative.")
        return cls(sort_by=sort_by, direction=direction, offset=page * size, limit=size)

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


class Page(BaseModel, Generic[T]):
    """One slice of a sorted result set."""

    model_config = ConfigDict(frozen=True)

    items: list[T]
    total: int
    offset: int
    limit: int

    @property
    def page_number(self) -> int:
        return self.offset // self.limit

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.offset + len(self.items) < self.total
