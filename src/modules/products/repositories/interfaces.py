"""Product repository interface (the record store contract).

Extends ``IRepository[ProductRecord]`` with identity assignment on
creation.  The store is a dumb ledger: it stamps ids, versions and
timestamps and applies writes atomically per id, but never filters by
visibility except in ``list_active``.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal

from modules.core.repositories.interfaces import IRepository
from modules.products.dtos import ProductRecord


class IProductRepository(IRepository[ProductRecord]):
    """Repository contract for the Product aggregate.

    Implementations must honour:

    - ``create`` returns version 0, ``deleted=False`` and identical
      ``created_at`` / ``updated_at``.
    - ``save`` with ``expected_version`` is an atomic compare-and-set on
      ``(id, version)`` and raises ``ProductVersionConflict`` without
      writing when the stored version moved; ``ProductNotFound`` when the
      id is unknown.
    - ``soft_delete`` raises ``ProductNotFound`` when the id is unknown or
      already deleted.
    - Listings sort by ``page_spec`` with ties broken by id ascending.
    - Backend faults surface as ``StorageFailure``.
    """

    @abstractmethod
    def create(self, name: str, price: Decimal) -> ProductRecord:
        """Insert a new product and return its first version."""
