from __future__ import annotations

from decimal import Decimal

import pytest

from modules.products.cache import ProductCache
from modules.products.repositories.memory_repository import InMemoryProductRepository
from modules.products.services import ProductService


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def cache(clock):
    return ProductCache(max_entries=100, ttl_seconds=3600, clock=clock)


@pytest.fixture()
def memory_repo():
    return InMemoryProductRepository()


@pytest.fixture()
def service(memory_repo, cache):
    """ProductService over the in-memory store and a fake-clock cache."""
    return ProductService(repository=memory_repo, cache=cache)


@pytest.fixture()
def widget(service):
    return service.add_product("Widget", Decimal("10.00"))
