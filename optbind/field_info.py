import dataclasses
import typing
from typing import Any

import attrs

from optbind.annotations import is_attrs, is_dataclass


@attrs.frozen
class FieldInfo:
    """A settable attribute declared on a destination class."""

    name: str
    annotation: Any


def _type_hints(cls) -> dict[str, Any]:
    # ``include_extras`` keeps ``Annotated`` metadata, which carries the ``Option``.
    return typing.get_type_hints(cls, include_extras=True)


def _dataclass_field_infos(cls) -> dict[str, FieldInfo]:
    hints = _type_hints(cls)
    return {f.name: FieldInfo(f.name, hints.get(f.name, f.type)) for f in dataclasses.fields(cls)}


def _attrs_field_infos(cls) -> dict[str, FieldInfo]:
    hints = _type_hints(cls)
    return {a.name: FieldInfo(a.name, hints.get(a.name, a.type)) for a in attrs.fields(cls)}


def _generic_class_field_infos(cls) -> dict[str, FieldInfo]:
    out = {}
    # ``get_type_hints`` walks the MRO base-first, so inherited fields come first.
    for name, annotation in _type_hints(cls).items():
        if typing.get_origin(annotation) is typing.ClassVar:
            continue
        out[name] = FieldInfo(name, annotation)
    return out


def get_field_infos(cls) -> dict[str, FieldInfo]:
    """Declared fields of ``cls`` in declaration order."""
    if is_dataclass(cls):
        return _dataclass_field_infos(cls)
    elif is_attrs(cls):
        return _attrs_field_infos(cls)
    else:
        return _generic_class_field_infos(cls)
