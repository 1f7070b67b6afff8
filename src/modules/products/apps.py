from __future__ import annotations

from django.apps import AppConfig


class ProductsConfig(AppConfig):
    """Product app; owns the process-wide product cache and service.

    Both are created once at startup so every caller in the process
    shares the same cache and the same per-id write locks.
    """

    name = "modules.products"
    label = "products"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self) -> None:
        from modules.products.bootstrap import build_product_cache, build_product_service

        self.product_cache = build_product_cache()
        self.product_service = build_product_service(cache=self.product_cache)
