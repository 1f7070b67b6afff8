"""In-memory implementation of the Product repository.

Keeps frozen ``ProductRecord`` images in a dict guarded by a lock, so
every write is an atomic compare-and-set per id.  Used for tests and for
running the service without a database; it has the same semantics as
``ProductDjangoRepository``.
"""

from __future__ import annotations

import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional
from uuid import UUID

import structlog
import uuid6
from django.utils import timezone

from modules.core.pagination import Page, PageSpec
from modules.products.dtos import CreateProductDTO, ProductRecord, build_dto
from modules.products.exceptions import ProductNotFound, ProductVersionConflict
from modules.products.repositories.interfaces import IProductRepository
from modules.products.visibility import is_visible

logger = structlog.get_logger(__name__)


def _coerce_id(id: UUID | str) -> Optional[UUID]:
    if isinstance(id, UUID):
        return id
    try:
        return UUID(str(id))
    except ValueError:
        return None


class InMemoryProductRepository(IProductRepository):
    """Thread-safe, process-local product store."""

    def __init__(self, clock: Callable[[], datetime] = timezone.now) -> None:
        self._clock = clock
        self._records: Dict[UUID, ProductRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # --- IProductRepository interface ----------------------------------------

    def create(self, name: str, price: Decimal) -> ProductRecord:
        dto = build_dto(CreateProductDTO, name=name, price=price)
        now = self._clock()
        record = ProductRecord(
            id=uuid6.uuid7(),
            name=dto.name,
            price=dto.price,
            version=0,
            deleted=False,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._records[record.id] = record
        return record

    def get_by_id(self, id: UUID | str) -> Optional[ProductRecord]:
        key = _coerce_id(id)
        if key is None:
            return None
        with self._lock:
            return self._records.get(key)

    def save(
        self, entity: ProductRecord, expected_version: Optional[int] = None
    ) -> ProductRecord:
        with self._lock:
            stored = self._records.get(entity.id)
            if stored is None:
                raise ProductNotFound(f"Product {entity.id} not found.")
            if expected_version is not None and stored.version != expected_version:
                raise ProductVersionConflict(
                    entity.id, expected_version, stored.version
                )
            # created_at is fixed at creation and deleted never reverts.
            record = entity.model_copy(
                update={
                    "created_at": stored.created_at,
                    "deleted": stored.deleted or entity.deleted,
                }
            )
            self._records[entity.id] = record
        logger.debug("product.saved", product_id=str(entity.id), version=record.version)
        return record

    def soft_delete(self, id: UUID | str) -> None:
        key = _coerce_id(id)
        with self._lock:
            stored = self._records.get(key) if key is not None else None
            if not is_visible(stored):
                raise ProductNotFound(f"Product {id} not found.")
            self._records[key] = stored.model_copy(
                update={
                    "deleted": True,
                    "version": stored.version + 1,
                    "updated_at": self._clock(),
                }
            )
        logger.debug("product.soft_deleted", product_id=str(key))

    def list_active(self, page_spec: PageSpec) -> Page[ProductRecord]:
        with self._lock:
            records = [r for r in self._records.values() if is_visible(r)]
        return self._paginate(records, page_spec)

    def list_all(self, page_spec: PageSpec) -> Page[ProductRecord]:
        with self._lock:
            records = list(self._records.values())
        return self._paginate(records, page_spec)

    # --- Helpers ---------------------------------------------------------------

    @staticmethod
    def _paginate(
        records: Iterable[ProductRecord], page_spec: PageSpec
    ) -> Page[ProductRecord]:
        # Two stable sorts: id ascending first, so equal sort keys keep
        # id order even when the primary sort is descending.
        ordered: List[ProductRecord] = sorted(records, key=lambda r: r.id)
        if page_spec.sort_by != "id":
            ordered.sort(
                key=lambda r: getattr(r, page_spec.sort_by),
                reverse=page_spec.descending,
            )
        elif page_spec.descending:
            ordered.reverse()
        window = ordered[page_spec.offset : page_spec.offset + page_spec.limit]
        return Page[ProductRecord](
            items=window,
            total=len(ordered),
            offset=page_spec.offset,
            limit=page_spec.limit,
        )
