"""Serialize a populated destination object back into command-line text."""

from collections.abc import Iterable
from enum import Flag, auto
from typing import Any, Optional

from optbind._convert import flag_members, to_display_string
from optbind.descriptor import DescriptorCatalog, FieldDescriptor, Kind
from optbind.registry import CatalogRegistry, default_registry
from optbind.tokenizer import tokenize


class FormatMethod(Flag):
    """Options for :func:`format_command_line`; combine with ``|``."""

    NONE = 0

    COMPLETE = auto()
    """Emit every field that holds a value."""

    SIMPLIFY = auto()
    """Skip non-required fields whose value equals the default instance's."""

    EQUAL_SIGN_STYLE = auto()
    """``--name=value``; collections joined with their separator."""


def _value_strings(descriptor: FieldDescriptor, value: Any) -> Optional[list[str]]:
    if value is None:
        return None
    if descriptor.kind is Kind.COLLECTION:
        return [to_display_string(x) for x in value]
    if descriptor.kind is Kind.FLAGS:
        names = [m.name for m in flag_members(value)]
        return names or None  # pyright: ignore[reportReturnType]
    return [to_display_string(value)]


def _quote(text: str) -> str:
    return f'"{text}"' if " " in text else text


def _join(values: Optional[Iterable[str]], separator: Optional[str] = None) -> str:
    if not values:
        return ""
    if separator is not None:
        return _quote(separator.join(values))
    return " ".join(_quote(x) for x in values)


def _is_default(
    descriptor: FieldDescriptor,
    catalog: DescriptorCatalog,
    text: str,
    separator: Optional[str] = None,
) -> bool:
    if descriptor.required or catalog.default_instance is None:
        return False
    default = _value_strings(descriptor, descriptor.get_value(catalog.default_instance))
    return _join(default, separator) == text


def format_command_line(
    target: Any,
    method: FormatMethod = FormatMethod.COMPLETE,
    *,
    registry: Optional[CatalogRegistry] = None,
) -> str:
    """Render ``target`` as command-line text that parses back into the same values.

    Positional values come first in index order, followed by ``--long value``
    pairs for the remaining fields. Fields holding ``None`` (and empty
    positional values) are skipped.

    Parameters
    ----------
    target: Any
        Populated destination instance.
    method: FormatMethod
        Rendering options.
    registry: Optional[CatalogRegistry]
        Catalog source; defaults to the process-wide registry.

    Returns
    -------
    str
        Space separated arguments (with a trailing space when non-empty).
    """
    if registry is None:
        registry = default_registry
    catalog = registry.get(target)
    simplify = FormatMethod.SIMPLIFY in method
    equal_sign = FormatMethod.EQUAL_SIGN_STYLE in method

    parts = []
    for descriptor in catalog.positional:
        values = _value_strings(descriptor, descriptor.get_value(target))
        if not values:
            continue
        text = _join(values)
        if not text or simplify and _is_default(descriptor, catalog, text):
            continue
        parts.append(text)

    for descriptor in catalog.named:
        if descriptor.is_positional:
            # Already emitted positionally.
            continue
        values = _value_strings(descriptor, descriptor.get_value(target))
        if values is None:
            continue
        separator = descriptor.separator if equal_sign and descriptor.kind is Kind.COLLECTION else None
        text = _join(values, separator)
        if simplify and _is_default(descriptor, catalog, text, separator):
            continue
        if equal_sign:
            parts.append(f"--{descriptor.long_name}={text}")
        else:
            parts.append(f"--{descriptor.long_name} {text}")

    return "".join(f"{part} " for part in parts)


def format_command_line_args(
    target: Any,
    method: FormatMethod = FormatMethod.COMPLETE,
    *,
    registry: Optional[CatalogRegistry] = None,
) -> list[str]:
    """Like :func:`format_command_line`, but split into tokens."""
    text = format_command_line(target, method, registry=registry)
    return tokenize(text).tokens if text else []
