"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.  Writes are
conditional ``UPDATE`` statements (``WHERE id = ? AND version = ?``), so
the compare-and-set on the version happens inside the database and two
writers can never both win the same version.

Lookups follow the Null Object pattern (``None`` for unknown or malformed
ids); write failures raise domain exceptions.  Any ``DatabaseError`` is
re-raised as ``StorageFailure``.
"""

from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.utils import timezone

from modules.core.pagination import Page, PageSpec
from modules.products.dtos import CreateProductDTO, ProductRecord, build_dto
from modules.products.exceptions import (
    ProductNotFound,
    ProductVersionConflict,
    StorageFailure,
)
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@contextmanager
def _storage_errors(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except DatabaseError as exc:
        logger.error("product.storage_failure", operation=operation, error=str(exc), **context)
        raise StorageFailure(f"Product store failed during {operation}: {exc}") from exc


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def __init__(self, clock: Callable[[], Any] = timezone.now) -> None:
        self._clock = clock

    def create(self, name: str, price: Decimal) -> ProductRecord:
        """Insert a product at version 0."""
        dto = build_dto(CreateProductDTO, name=name, price=price)
        now = self._clock()
        with _storage_errors("create"), transaction.atomic():
            product = Product.objects.create(
                name=dto.name,
                price=dto.price,
                created_at=now,
                updated_at=now,
            )
        return ProductRecord.from_entity(product)

    def get_by_id(self, id: UUID | str) -> Optional[ProductRecord]:
        """Retrieve a product by primary key, deleted or not.

        Returns ``None`` for non-existent or invalid IDs.
        """
        with _storage_errors("get_by_id", product_id=str(id)):
            try:
                product = Product.objects.filter(id=id).first()
            except (ValueError, ValidationError):
                return None
        return ProductRecord.from_entity(product) if product else None

    def save(
        self, entity: ProductRecord, expected_version: Optional[int] = None
    ) -> ProductRecord:
        """Write the full record image, conditionally on ``expected_version``."""
        changes: Dict[str, Any] = {
            "name": entity.name,
            "price": entity.price,
            "version": entity.version,
            "updated_at": entity.updated_at,
        }
        if entity.deleted:
            changes["deleted"] = True

        with _storage_errors("save", product_id=str(entity.id)), transaction.atomic():
            rows = Product.objects.filter(id=entity.id)
            if expected_version is not None:
                rows = rows.filter(version=expected_version)
            if rows.update(**changes) == 0:
                current = Product.objects.filter(id=entity.id).first()
                if current is None:
                    raise ProductNotFound(f"Product {entity.id} not found.")
                raise ProductVersionConflict(
                    entity.id, expected_version, current.version
                )
            product = Product.objects.get(id=entity.id)

        logger.info(
            "product.saved",
            product_id=str(entity.id),
            version=product.version,
        )
        return ProductRecord.from_entity(product)

    def soft_delete(self, id: UUID | str) -> None:
        """Soft-delete a product by ID, bumping its version."""
        with _storage_errors("soft_delete", product_id=str(id)), transaction.atomic():
            try:
                count = Product.objects.filter(id=id).soft_delete(self._clock())
            except (ValueError, ValidationError):
                count = 0
        if count == 0:
            raise ProductNotFound(f"Product {id} not found.")
        logger.info("product.row_soft_deleted", product_id=str(id))

    def list_active(self, page_spec: PageSpec) -> Page[ProductRecord]:
        return self._paginate(Product.objects.alive(), page_spec)

    def list_all(self, page_spec: PageSpec) -> Page[ProductRecord]:
        return self._paginate(Product.objects.all(), page_spec)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _paginate(queryset, page_spec: PageSpec) -> Page[ProductRecord]:
        prefix = "-" if page_spec.descending else ""
        if page_spec.sort_by == "id":
            ordering = [f"{prefix}id"]
        else:
            ordering = [f"{prefix}{page_spec.sort_by}", "id"]

        with _storage_errors("list", sort_by=page_spec.sort_by):
            queryset = queryset.order_by(*ordering)
            total = queryset.count()
            window = queryset[page_spec.offset : page_spec.offset + page_spec.limit]
            items = [ProductRecord.from_entity(p) for p in window]

        return Page[ProductRecord](
            items=items,
            total=total,
            offset=page_spec.offset,
            limit=page_spec.limit,
        )
