from typing import Any

from optbind._cache import KeyedCache
from optbind.descriptor import DescriptorCatalog, build_catalog


def _target_type(target: Any) -> type:
    return target if isinstance(target, type) else type(target)


class CatalogRegistry:
    """Memoizes one :class:`~optbind.descriptor.DescriptorCatalog` per destination type.

    Each type is reflected exactly once per registry, even under concurrent first
    access. Construct separate registries to isolate caches (e.g. in tests).
    """

    def __init__(self):
        self._cache: KeyedCache[DescriptorCatalog] = KeyedCache()

    def get(self, target: Any) -> DescriptorCatalog:
        """Catalog for a class, or for the class of an instance."""
        type_ = _target_type(target)
        return self._cache.get_or_create(type_, lambda: build_catalog(type_))

    def __contains__(self, target: Any) -> bool:
        return _target_type(target) in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        self._cache.clear()


default_registry = CatalogRegistry()


def get_catalog(target: Any) -> DescriptorCatalog:
    """Catalog for ``target`` from the process-wide default registry."""
    return default_registry.get(target)
