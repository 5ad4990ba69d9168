import collections
import threading
from dataclasses import dataclass, field
from enum import Flag, auto
from typing import Annotated, List, Optional

import attrs
import pytest

from optbind import CatalogRegistry, Kind, Option, get_catalog


class Access(Flag):
    READ = auto()
    WRITE = auto()


@dataclass
class Sample:
    command: Annotated[str, Option(index=0, meta_name="COMMAND")] = ""
    files: Annotated[Optional[list[str]], Option(index=1)] = None
    verbose: Annotated[bool, Option("v", "verbose")] = False
    name: Annotated[str, Option("n")] = ""
    counts: Annotated[List[int], Option()] = field(default_factory=list)
    queue: Annotated[collections.deque[str], Option()] = None  # pyright: ignore
    bare: Annotated[list, Option()] = None  # pyright: ignore
    access: Annotated[Access, Option("a")] = Access(0)
    plain: int = 0


def test_catalog_descriptors_only_option_fields(registry):
    catalog = registry.get(Sample)
    assert [d.name for d in catalog] == [
        "command",
        "files",
        "verbose",
        "name",
        "counts",
        "queue",
        "bare",
        "access",
    ]


def test_catalog_long_name_defaults_to_identifier(registry):
    catalog = registry.get(Sample)
    assert catalog["name"].long_name == "name"
    assert catalog["name"].short_name == "n"
    assert all(d.long_name for d in catalog)


@pytest.mark.parametrize(
    "name, kind, element_type",
    [
        ("command", Kind.SCALAR, None),
        ("files", Kind.COLLECTION, str),
        ("counts", Kind.COLLECTION, int),
        ("queue", Kind.COLLECTION, str),
        ("bare", Kind.COLLECTION, str),
        ("access", Kind.FLAGS, None),
        ("verbose", Kind.SCALAR, None),
    ],
)
def test_catalog_classification(registry, name, kind, element_type):
    descriptor = registry.get(Sample)[name]
    assert descriptor.kind is kind
    assert descriptor.element_type is element_type


def test_catalog_views(registry):
    catalog = registry.get(Sample)
    assert [d.name for d in catalog.positional] == ["command", "files"]
    assert "command" not in [d.name for d in catalog.named]
    assert "verbose" in [d.name for d in catalog.named]


def test_catalog_dual_mode_in_both_views(registry):
    @dataclass
    class Dual:
        source: Annotated[str, Option("s", "source", index=0)] = ""

    catalog = registry.get(Dual)
    descriptor = catalog["source"]
    assert descriptor.is_dual_mode
    assert descriptor in catalog.positional
    assert descriptor in catalog.named


def test_catalog_find_short_long(registry):
    catalog = registry.get(Sample)
    assert catalog.find_short("v").name == "verbose"
    assert catalog.find_short("V") is None
    assert catalog.find_short("V", ignore_case=True).name == "verbose"
    assert catalog.find_long("VERBOSE", ignore_case=True).name == "verbose"
    assert catalog.find_long("missing") is None
    # Positional fields remain reachable by name.
    assert catalog.find_long("command").name == "command"


def test_catalog_find_positional(registry):
    catalog = registry.get(Sample)
    assert catalog.find_positional(0).name == "command"
    assert catalog.find_positional(1).name == "files"
    assert catalog.find_positional(2) is None


def test_catalog_find_last_positional_collection(registry):
    catalog = registry.get(Sample)
    assert catalog.find_last_positional_collection(5).name == "files"
    assert catalog.find_last_positional_collection(2).name == "files"
    # Strictly below the query index.
    assert catalog.find_last_positional_collection(1) is None


def test_catalog_find_last_positional_collection_never_scalar(registry):
    @dataclass
    class Scalars:
        a: Annotated[str, Option(index=0)] = ""
        b: Annotated[str, Option(index=1)] = ""

    assert registry.get(Scalars).find_last_positional_collection(5) is None


def test_catalog_default_instance(registry):
    catalog = registry.get(Sample)
    assert isinstance(catalog.default_instance, Sample)


def test_catalog_default_instance_failure_tolerated(registry):
    class NeedsArgs:
        value: Annotated[int, Option()]

        def __init__(self, value):
            self.value = value

    catalog = registry.get(NeedsArgs)
    assert catalog.default_instance is None
    assert catalog["value"].long_name == "value"


def test_catalog_idempotent(registry):
    assert registry.get(Sample) is registry.get(Sample)
    assert registry.get(Sample()) is registry.get(Sample)


def test_catalog_distinct_types(registry):
    @dataclass
    class Other:
        x: Annotated[int, Option()] = 0

    assert registry.get(Sample) is not registry.get(Other)
    assert len(registry) == 2


def test_catalog_isolated_registries():
    assert CatalogRegistry().get(Sample) is not CatalogRegistry().get(Sample)


def test_get_catalog_default_registry():
    assert get_catalog(Sample) is get_catalog(Sample)


def test_catalog_concurrent_first_access(registry, monkeypatch):
    import optbind.registry

    calls = []
    original = optbind.registry.build_catalog

    def counting_build(type_):
        calls.append(type_)
        return original(type_)

    monkeypatch.setattr(optbind.registry, "build_catalog", counting_build)

    barrier = threading.Barrier(8)
    results = []

    def worker():
        barrier.wait()
        results.append(registry.get(Sample))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert calls == [Sample]
    assert all(r is results[0] for r in results)


def test_catalog_inherited_fields(registry):
    @dataclass
    class Base:
        a: Annotated[int, Option()] = 0

    @dataclass
    class Child(Base):
        b: Annotated[int, Option()] = 0

    assert [d.name for d in registry.get(Child)] == ["a", "b"]


def test_catalog_attrs_class(registry):
    @attrs.define
    class AttrsOptions:
        name: Annotated[str, Option("n")] = ""
        tags: Annotated[list[str], Option()] = attrs.Factory(list)

    catalog = registry.get(AttrsOptions)
    assert catalog["tags"].kind is Kind.COLLECTION
    assert catalog.find_short("n").name == "name"


def test_catalog_plain_class(registry):
    class PlainOptions:
        name: Annotated[str, Option("n")] = ""
        count: Annotated[int, Option()] = 0

    assert [d.name for d in registry.get(PlainOptions)] == ["name", "count"]


def test_registry_contains_and_clear(registry):
    assert Sample not in registry
    catalog = registry.get(Sample())
    assert Sample in registry
    assert Sample() in registry

    registry.clear()
    assert Sample not in registry
    assert len(registry) == 0
    assert registry.get(Sample) is not catalog
