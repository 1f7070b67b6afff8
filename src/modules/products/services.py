"""Product service layer (Use Cases).

Orchestrates the injected ``IProductRepository`` (source of truth) and
product cache (secondary, write-through) for the Product aggregate.

Rules enforced here:
- Optimistic concurrency: ``update_price`` rejects a stale
  ``expected_version`` and hands the store a compare-and-set guard, so
  two writers can never both win the same version.
- Write-through ordering: for a given id, the cache write that follows a
  store commit happens under the same per-id lock as the commit, so the
  cache never regresses to an older snapshot or outlives a delete.
- Visibility: every active read path goes through ``is_visible``.

The service performs no retries.  ``ProductVersionConflict`` needs the
caller to choose a new value; ``StorageFailure`` is surfaced unchanged.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional
from uuid import UUID

import structlog
from django.utils import timezone

from modules.core.pagination import Page, PageSpec
from modules.products.dtos import (
    CreateProductDTO,
    ProductRecord,
    UpdatePriceDTO,
    build_dto,
)
from modules.products.exceptions import ProductNotFound, ProductVersionConflict
from modules.products.visibility import is_visible

if TYPE_CHECKING:
    from modules.products.cache import CacheStats, ProductCachePort
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

DEFAULT_LOCK_STRIPES = 64


def _parse_id(product_id: UUID | str) -> UUID:
    if isinstance(product_id, UUID):
        return product_id
    try:
        return UUID(str(product_id))
    except ValueError as exc:
        raise ProductNotFound(f"Product {product_id} not found.") from exc


class ProductService:
    """Application service for Product use-cases.

    Receives the repository and the cache via constructor injection (DIP);
    neither is created nor looked up here.
    """

    def __init__(
        self,
        repository: IProductRepository,
        cache: ProductCachePort,
        *,
        lock_stripes: int = DEFAULT_LOCK_STRIPES,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        if lock_stripes < 1:
            raise ValueError("lock_stripes must be at least 1")
        self._repo = repository
        self._cache = cache
        self._clock = clock
        self._locks: List[threading.RLock] = [
            threading.RLock() for _ in range(lock_stripes)
        ]

    @contextmanager
    def _locked(self, product_id: UUID) -> Iterator[None]:
        lock = self._locks[product_id.int % len(self._locks)]
        with lock:
            yield

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_product(self, name: str, price: Decimal | str) -> ProductRecord:
        """Create a product at version 0 and write it through to the cache.

        Raises:
            InvalidProductInput: blank name or negative price.
        """
        dto = build_dto(CreateProductDTO, name=name, price=price)
        product = self._repo.create(dto.name, dto.price)
        with self._locked(product.id):
            self._cache.put(str(product.id), product)
        logger.info(
            "product.created",
            product_id=str(product.id),
            name=product.name,
            price=str(product.price),
        )
        return product

    def update_price(
        self,
        product_id: UUID | str,
        new_price: Decimal | str,
        expected_version: Optional[int] = None,
    ) -> ProductRecord:
        """Change a product's price under optimistic concurrency control.

        ``expected_version=None`` skips the caller's check but still guards
        the store write with the version just loaded.

        Raises:
            InvalidProductInput: negative, over-wide or sub-cent price, or a
                negative expected version.
            ProductNotFound: the product is absent or soft-deleted.
            ProductVersionConflict: ``expected_version`` is stale, or (also
                when ``expected_version`` is None) the loaded snapshot was
                stale because another process wrote the row first.  The
                cached snapshot is dropped, so a retry reads the new version.
            StorageFailure: the store could not complete the write.
        """
        dto = build_dto(UpdatePriceDTO, price=new_price, expected_version=expected_version)
        pid = _parse_id(product_id)
        key = str(pid)
        log = logger.bind(product_id=key, expected_version=dto.expected_version)

        with self._locked(pid):
            current = self.get_product_by_id(pid)

            if dto.expected_version is not None and dto.expected_version != current.version:
                log.warning("product.version_conflict", current_version=current.version)
                raise ProductVersionConflict(pid, dto.expected_version, current.version)

            candidate = current.with_price(dto.price, self._clock())
            try:
                saved = self._repo.save(candidate, expected_version=current.version)
            except (ProductVersionConflict, ProductNotFound):
                # The cached snapshot lost a race with another store writer.
                self._cache.invalidate(key)
                log.warning("product.store_rejected_write", loaded_version=current.version)
                raise
            self._cache.put(key, saved)

        log.info(
            "product.price_updated",
            price=str(saved.price),
            version=saved.version,
        )
        return saved

    def soft_delete_product(self, product_id: UUID | str) -> None:
        """Soft-delete a product and drop it from the cache.

        Raises:
            ProductNotFound: the product is absent or already deleted.
        """
        pid = _parse_id(product_id)
        key = str(pid)
        with self._locked(pid):
            self.get_product_by_id(pid)
            try:
                self._repo.soft_delete(pid)
            finally:
                self._cache.invalidate(key)
        logger.info("product.soft_deleted", product_id=key)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product_by_id(self, product_id: UUID | str) -> ProductRecord:
        """Return a visible product, reading through the cache.

        Raises:
            ProductNotFound: the product is absent or soft-deleted.
        """
        pid = _parse_id(product_id)
        key = str(pid)

        cached = self._cache.get(key)
        if cached is not None:
            if is_visible(cached):
                logger.debug("product.cache_hit", product_id=key)
                return cached
            self._cache.invalidate(key)
            logger.warning("product.cache_held_deleted", product_id=key)
            raise ProductNotFound(f"Product {key} not found.")

        logger.debug("product.cache_miss", product_id=key)
        with self._locked(pid):
            product = self._repo.get_by_id(pid)
            if not is_visible(product):
                raise ProductNotFound(f"Product {key} not found.")
            self._cache.put(key, product)
        return product

    def get_all_products(self, page_spec: Optional[PageSpec] = None) -> Page[ProductRecord]:
        """Return a page of active products straight from the store."""
        page_spec = page_spec or PageSpec()
        page = self._repo.list_active(page_spec)
        logger.info(
            "product.listed",
            sort_by=page_spec.sort_by,
            direction=page_spec.direction,
            offset=page_spec.offset,
            limit=page_spec.limit,
            returned=len(page.items),
            total=page.total,
        )
        return page

    def get_all_products_including_deleted(
        self, page_spec: Optional[PageSpec] = None
    ) -> Page[ProductRecord]:
        """Audit listing: every product, soft-deleted ones included."""
        return self._repo.list_all(page_spec or PageSpec())

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()
