"""Product snapshot caches.

``ProductCache`` is a bounded, time-expiring, least-recently-used map from
product id to an immutable ``ProductRecord``.  It is content-agnostic: it
never looks at ``deleted`` or ``version``.  Keeping deleted snapshots out
and invalidating on delete is the ProductService's job.

``DjangoProductCache`` offers the same port over a configured Django cache
alias (e.g. the Redis backend in ``CACHES``) for deployments that want a
cache shared between processes.

Both keep hit/miss counters for operational tuning; the counters carry no
correctness weight.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, runtime_checkable

import structlog
from django.core.cache import caches

from modules.products.dtos import ProductRecord

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ENTRIES = 100
DEFAULT_TTL_SECONDS = 3600


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time view of cache counters."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    size: int = 0

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_ratio(self) -> float:
        return self.hits / self.requests if self.requests else 0.0


@runtime_checkable
class ProductCachePort(Protocol):
    """What ProductService needs from a cache."""

    def get(self, key: str) -> Optional[ProductRecord]: ...

    def put(self, key: str, product: ProductRecord) -> None: ...

    def invalidate(self, key: str) -> None: ...

    def stats(self) -> CacheStats: ...


@dataclass(frozen=True)
class _CacheEntry:
    product: ProductRecord
    inserted_at: float


class ProductCache:
    """In-process LRU cache with a fixed time-to-live per entry.

    Args:
        max_entries: Upper bound on distinct keys (default: 100).
        ttl_seconds: Lifetime of an entry from insertion (default: 3600).
        clock: Monotonic seconds source, injectable for tests.
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            entry = self._entries.get(key)  # type: ignore[arg-type]
            return entry is not None and not self._is_expired(entry, self._clock())

    def get(self, key: str) -> Optional[ProductRecord]:
        """Return the cached snapshot, or ``None`` on miss or expiry."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._expirations += 1
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.product

    def put(self, key: str, product: ProductRecord) -> None:
        """Insert or replace ``key``; replacing restarts its time-to-live."""
        with self._lock:
            now = self._clock()
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                self._make_room(now)
            self._entries[key] = _CacheEntry(product=product, inserted_at=now)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
                size=len(self._entries),
            )

    # --- Helpers ---------------------------------------------------------------

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.inserted_at >= self.ttl_seconds

    def _make_room(self, now: float) -> None:
        # Caller holds the lock.  Dead entries go before live ones.
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for key in expired:
            del self._entries[key]
        self._expirations += len(expired)
        if len(self._entries) >= self.max_entries:
            key, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("product_cache.evicted", key=key)


class DjangoProductCache:
    """Product cache port over a Django cache alias.

    TTL maps to the backend ``timeout``; capacity belongs to the backend
    (``MAX_ENTRIES`` for LocMemCache, ``maxmemory`` for Redis).
    """

    def __init__(
        self,
        alias: str = "default",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        key_prefix: str = "product:",
    ) -> None:
        self.alias = alias
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def _backend(self):
        return caches[self.alias]

    def _key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def get(self, key: str) -> Optional[ProductRecord]:
        product = self._backend.get(self._key(key))
        with self._lock:
            if product is None:
                self._misses += 1
            else:
                self._hits += 1
        return product

    def put(self, key: str, product: ProductRecord) -> None:
        self._backend.set(self._key(key), product, timeout=self.ttl_seconds)

    def invalidate(self, key: str) -> None:
        self._backend.delete(self._key(key))

    def clear(self) -> None:
        self._backend.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses)
