"""Generic caching utilities."""

import threading
from collections.abc import Callable, Hashable
from typing import Any, Generic, TypeVar

from optbind.utils import Sentinel

V = TypeVar("V")


class _CACHE_MISS(Sentinel):  # noqa: N801
    """Sentinel for cache misses (distinct from None which is a valid cached value)."""


class KeyedCache(Generic[V]):
    """Thread-safe memoization keyed on an arbitrary hashable.

    The first caller for a key builds the value while holding the lock; every
    later (or concurrent) caller receives that same object. Lookups of already
    populated keys never take the lock.

    Example
    -------
    >>> cache = KeyedCache()
    >>> cache.get_or_create("a", expensive_computation)
    >>> cache.clear()
    """

    def __init__(self):
        self._data: dict[Hashable, V] = {}
        self._lock = threading.Lock()

    def get_or_create(self, key: Hashable, factory: Callable[[], V]) -> V:
        cached: Any = self._data.get(key, _CACHE_MISS)
        if cached is not _CACHE_MISS:
            return cached

        with self._lock:
            cached = self._data.get(key, _CACHE_MISS)
            if cached is not _CACHE_MISS:
                return cached
            result = factory()
            # Published only once fully built.
            self._data[key] = result
            return result

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
