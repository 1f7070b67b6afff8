"""Composition root for the product core.

The only place that knows which concrete store and cache back the
service.  The cache is built once per process by ``ProductsConfig.ready``
and handed to every service built here.
"""

from __future__ import annotations

from typing import Optional

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from modules.products.cache import DjangoProductCache, ProductCache, ProductCachePort
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.repositories.interfaces import IProductRepository
from modules.products.services import DEFAULT_LOCK_STRIPES, ProductService

CACHE_BACKENDS = ("local", "django")


def build_product_cache(options: Optional[dict] = None) -> ProductCachePort:
    """Build the product cache described by ``settings.PRODUCT_CACHE``."""
    options = options if options is not None else getattr(settings, "PRODUCT_CACHE", {})
    backend = options.get("BACKEND", "local")
    ttl = options.get("TTL_SECONDS", 3600)

    if backend == "local":
        return ProductCache(
            max_entries=options.get("MAX_ENTRIES", 100),
            ttl_seconds=ttl,
        )
    if backend == "django":
        return DjangoProductCache(alias=options.get("ALIAS", "default"), ttl_seconds=ttl)
    raise ImproperlyConfigured(
        f"PRODUCT_CACHE BACKEND must be one of {CACHE_BACKENDS}, got {backend!r}."
    )


def build_product_service(
    repository: Optional[IProductRepository] = None,
    cache: Optional[ProductCachePort] = None,
) -> ProductService:
    """Wire a new ProductService to a store and a cache.

    Defaults to the Django store and the app-wide cache.  Services built
    here do not share write locks with ``get_product_service()``; use one
    service per cache.
    """
    if cache is None:
        cache = apps.get_app_config("products").product_cache
    return ProductService(
        repository=repository or ProductDjangoRepository(),
        cache=cache,
        lock_stripes=getattr(settings, "PRODUCT_WRITE_LOCK_STRIPES", DEFAULT_LOCK_STRIPES),
    )


def get_product_service() -> ProductService:
    """Return the process-wide service built at app startup."""
    return apps.get_app_config("products").product_service
