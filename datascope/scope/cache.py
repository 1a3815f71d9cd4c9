"""
Cache used for scope rule and department lookups.

The resolver only needs ``get``/``put`` per (namespace, key). Any backend with
those two operations can be injected; ``InMemoryScopeCache`` is the default
process-wide implementation.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Hashable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

SCOPE_CACHE_CLASS = "scope:class"
SCOPE_CACHE_CODE = "scope:code"
DEPT_CACHE_ANCESTORS = "dept:ancestors"


class _NotFound:
    """Marker stored for lookups that found nothing (negative caching)."""

    _instance: _NotFound | None = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


class ScopeCache(Protocol):
    def get(self, namespace: str, key: Hashable) -> Any | None: ...

    def put(self, namespace: str, key: Hashable, value: Any) -> None: ...


class InMemoryScopeCache:
    """
    Thread-safe dict cache with an optional TTL.

    Entries are never mutated in place; ``evict``/``clear`` exist for whoever
    owns invalidation (e.g. an admin endpoint after editing rules).
    """

    def __init__(self, ttl_seconds: float | None = None) -> None:
        self._ttl = ttl_seconds
        self._data: dict[tuple[str, Hashable], tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, namespace: str, key: Hashable) -> Any | None:
        with self._lock:
            entry = self._data.get((namespace, key))
            if entry is None:
                return None
            stored_at, value = entry
            if self._ttl is not None and (time.monotonic() - stored_at) >= self._ttl:
                del self._data[(namespace, key)]
                logger.debug("Cache entry expired namespace=%s key=%s", namespace, key)
                return None
            return value

    def put(self, namespace: str, key: Hashable, value: Any) -> None:
        with self._lock:
            self._data[(namespace, key)] = (time.monotonic(), value)

    def evict(self, namespace: str, key: Hashable) -> None:
        with self._lock:
            self._data.pop((namespace, key), None)

    def clear(self, namespace: str | None = None) -> None:
        with self._lock:
            if namespace is None:
                self._data.clear()
                return
            for cache_key in [k for k in self._data if k[0] == namespace]:
                del self._data[cache_key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
