from __future__ import annotations

import pytest
from django.apps import apps
from django.core.exceptions import ImproperlyConfigured

from modules.products.bootstrap import (
    build_product_cache,
    build_product_service,
    get_product_service,
)
from modules.products.cache import DjangoProductCache, ProductCache, ProductCachePort
from modules.products.repositories import ProductDjangoRepository
from modules.products.services import ProductService

pytestmark = pytest.mark.unit


class TestBuildProductCache:
    def test_local_backend_uses_configured_bounds(self):
        cache = build_product_cache(
            {"BACKEND": "local", "MAX_ENTRIES": 5, "TTL_SECONDS": 30}
        )
        assert isinstance(cache, ProductCache)
        assert cache.max_entries == 5
        assert cache.ttl_seconds == 30

    def test_django_backend_uses_alias(self):
        cache = build_product_cache(
            {"BACKEND": "django", "ALIAS": "products", "TTL_SECONDS": 60}
        )
        assert isinstance(cache, DjangoProductCache)
        assert cache.alias == "products"
        assert cache.ttl_seconds == 60

    def test_defaults_come_from_settings(self, settings):
        settings.PRODUCT_CACHE = {"BACKEND": "local", "MAX_ENTRIES": 7, "TTL_SECONDS": 9}
        cache = build_product_cache()
        assert cache.max_entries == 7
        assert cache.ttl_seconds == 9

    def test_unknown_backend_is_rejected(self):
        with pytest.raises(ImproperlyConfigured):
            build_product_cache({"BACKEND": "memcached"})

    def test_both_backends_satisfy_port(self):
        assert isinstance(build_product_cache({"BACKEND": "local"}), ProductCachePort)
        assert isinstance(build_product_cache({"BACKEND": "django"}), ProductCachePort)


class TestBuildProductService:
    def test_defaults_to_django_store_and_app_cache(self):
        service = build_product_service()
        assert isinstance(service, ProductService)
        assert isinstance(service._repo, ProductDjangoRepository)
        assert service._cache is apps.get_app_config("products").product_cache

    def test_accepts_injected_collaborators(self, memory_repo, cache):
        service = build_product_service(repository=memory_repo, cache=cache)
        assert service._repo is memory_repo
        assert service._cache is cache

    def test_lock_stripes_from_settings(self, settings, memory_repo, cache):
        settings.PRODUCT_WRITE_LOCK_STRIPES = 4
        service = build_product_service(repository=memory_repo, cache=cache)
        assert len(service._locks) == 4


class TestAppConfig:
    def test_ready_builds_one_shared_service(self):
        config = apps.get_app_config("products")
        assert get_product_service() is config.product_service
        assert config.product_service._cache is config.product_cache
