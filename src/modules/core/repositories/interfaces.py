"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Generic, Optional, TypeVar
from uuid import UUID

if TYPE_CHECKING:
    from modules.core.pagination import Page, PageSpec

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract for versioned, soft-deletable records.

    Type parameter ``T`` represents the immutable record type handed out
    by the repository (e.g. ``ProductRecord``).  Lookups ignore the
    ``deleted`` flag; visibility filtering belongs to the caller except on
    the explicitly "active" listing.
    """

    @abstractmethod
    def get_by_id(self, id: UUID | str) -> Optional[T]:
        """Retrieve a record by its primary key, deleted or not."""

    @abstractmethod
    def save(self, entity: T, expected_version: Optional[int] = None) -> T:
        """Persist a full record image.

        With ``expected_version`` the write only succeeds if the stored
        version still equals it (compare-and-set).
        """

    @abstractmethod
    def soft_delete(self, id: UUID | str) -> None:
        """Mark a record deleted, bumping its version."""

    @abstractmethod
    def list_active(self, page_spec: PageSpec) -> Page[T]:
        """Return a page of non-deleted records."""

    @abstractmethod
    def list_all(self, page_spec: PageSpec) -> Page[T]:
        """Return a page of records, deleted ones included."""
