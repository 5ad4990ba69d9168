import collections
import logging
from enum import Enum
from typing import Any, Optional, get_origin

from attrs import evolve, field

from optbind.annotations import collection_element_type, is_collection, is_enum_flag, resolve
from optbind.field_info import get_field_infos
from optbind.option import Option, get_option
from optbind.utils import equals_ignore_case, frozen

logger = logging.getLogger(__name__)


class Kind(Enum):
    """How a field consumes command-line values."""

    SCALAR = "scalar"
    """Exactly one value (booleans may take none)."""

    COLLECTION = "collection"
    """Every value in the run, accumulated into a list-like container."""

    FLAGS = "flags"
    """Every value in the run, combined into one :class:`~enum.Flag` value."""


def _classify(hint: Any) -> Kind:
    if is_collection(hint):
        return Kind.COLLECTION
    if is_enum_flag(resolve(hint)):
        return Kind.FLAGS
    return Kind.SCALAR


@frozen
class FieldDescriptor:
    """Immutable binding metadata for one destination field."""

    name: str
    """Attribute identifier on the destination class."""

    hint: Any
    """Declared type with ``Annotated``/``Optional`` resolved."""

    option: Option
    """Option metadata with ``long_name`` filled in."""

    kind: Kind

    element_type: Any = None
    """Element type for :attr:`Kind.COLLECTION`; ``None`` otherwise."""

    explicit_name: bool = False
    """``True`` if the :class:`Option` declared a ``short_name`` or ``long_name``."""

    @property
    def short_name(self) -> Optional[str]:
        return self.option.short_name

    @property
    def long_name(self) -> str:
        return self.option.long_name  # pyright: ignore[reportReturnType]

    @property
    def required(self) -> bool:
        return self.option.required

    @property
    def help(self) -> str:
        return self.option.help

    @property
    def separator(self) -> Optional[str]:
        return self.option.separator

    @property
    def index(self) -> int:
        return self.option.index

    @property
    def meta_name(self) -> str:
        return self.option.meta_name

    @property
    def env_var(self) -> Optional[str]:
        return self.option.env_var

    @property
    def is_positional(self) -> bool:
        return self.option.is_positional

    @property
    def is_dual_mode(self) -> bool:
        return self.is_positional and self.explicit_name

    @property
    def is_bool(self) -> bool:
        return self.kind is Kind.SCALAR and self.hint is bool

    @property
    def container_type(self) -> type:
        """Concrete container to build for :attr:`Kind.COLLECTION` fields."""
        return get_origin(self.hint) or self.hint

    @property
    def display_name(self) -> str:
        """Name used in error messages: ``--long``, else ``-s``, else ``<meta>``."""
        if self.long_name:
            return f"--{self.long_name}"
        if self.short_name:
            return f"-{self.short_name}"
        return f"<{self.meta_name}>"

    @property
    def positional_label(self) -> str:
        return self.meta_name or f"arg{self.index}"

    def new_container(self, values=()):
        if self.container_type is collections.deque:
            return collections.deque(values)
        return list(values)

    def get_value(self, instance: Any) -> Any:
        return getattr(instance, self.name, None)

    def set_value(self, instance: Any, value: Any) -> None:
        setattr(instance, self.name, value)


def build_descriptor(name: str, annotation: Any) -> Optional[FieldDescriptor]:
    """Create a :class:`FieldDescriptor`, or ``None`` if ``annotation`` carries no :class:`Option`."""
    hint, option = get_option(annotation)
    if option is None:
        return None

    explicit_name = bool(option.short_name or option.long_name)
    if not option.long_name:
        option = evolve(option, long_name=name)

    hint = resolve(hint)
    kind = _classify(hint)
    return FieldDescriptor(
        name=name,
        hint=hint,
        option=option,
        kind=kind,
        element_type=collection_element_type(hint) if kind is Kind.COLLECTION else None,
        explicit_name=explicit_name,
    )


def _create_default_instance(type_: type) -> Any:
    try:
        return type_()
    except Exception as e:
        logger.debug("Could not create a default instance of %s: %s", type_.__qualname__, e)
        return None


def _match(a: Optional[str], b: str, ignore_case: bool) -> bool:
    if a is None:
        return False
    return equals_ignore_case(a, b) if ignore_case else a == b


@frozen
class DescriptorCatalog:
    """Ordered :class:`FieldDescriptor` collection for one destination type.

    Catalogs are immutable and hold no parser configuration, so any number of
    parsers may share one.
    """

    type_: type

    descriptors: tuple[FieldDescriptor, ...]

    positional: tuple[FieldDescriptor, ...] = field(init=False)
    """Positional descriptors in ascending index order."""

    named: tuple[FieldDescriptor, ...] = field(init=False)
    """Named-only descriptors plus dual-mode ones."""

    default_instance: Any = field(default=None, eq=False, hash=False)
    """Zero-argument instance of :attr:`type_`; ``None`` if construction failed."""

    @positional.default  # pyright: ignore[reportAttributeAccessIssue]
    def _positional_default(self):
        return tuple(sorted((d for d in self.descriptors if d.is_positional), key=lambda d: d.index))

    @named.default  # pyright: ignore[reportAttributeAccessIssue]
    def _named_default(self):
        return tuple(d for d in self.descriptors if not d.is_positional or d.is_dual_mode)

    def __iter__(self):
        return iter(self.descriptors)

    def __getitem__(self, name: str) -> FieldDescriptor:
        for descriptor in self.descriptors:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    def find_short(self, name: str, ignore_case: bool = False) -> Optional[FieldDescriptor]:
        for descriptor in self.descriptors:
            if _match(descriptor.short_name, name, ignore_case):
                return descriptor
        return None

    def find_long(self, name: str, ignore_case: bool = False) -> Optional[FieldDescriptor]:
        for descriptor in self.descriptors:
            if _match(descriptor.long_name, name, ignore_case):
                return descriptor
        return None

    def find_positional(self, index: int) -> Optional[FieldDescriptor]:
        for descriptor in self.positional:
            if descriptor.index == index:
                return descriptor
        return None

    def find_last_positional_collection(self, index: int) -> Optional[FieldDescriptor]:
        """Positional collection with the greatest index strictly below ``index``."""
        for descriptor in reversed(self.positional):
            if descriptor.index < index and descriptor.kind is Kind.COLLECTION:
                return descriptor
        return None

    def option_names(self) -> list[str]:
        """Every accepted ``--long``/``-s`` spelling."""
        out = []
        for descriptor in self.descriptors:
            out.append(f"--{descriptor.long_name}")
            if descriptor.short_name:
                out.append(f"-{descriptor.short_name}")
        return out


def build_catalog(type_: type) -> DescriptorCatalog:
    """Reflect ``type_`` into a :class:`DescriptorCatalog`.

    Use :func:`optbind.get_catalog` instead; it caches the result.
    """
    descriptors = []
    for info in get_field_infos(type_).values():
        descriptor = build_descriptor(info.name, info.annotation)
        if descriptor is not None:
            descriptors.append(descriptor)
    logger.debug("Built catalog for %s with %d fields.", type_.__qualname__, len(descriptors))
    return DescriptorCatalog(
        type_=type_,
        descriptors=tuple(descriptors),
        default_instance=_create_default_instance(type_),
    )
