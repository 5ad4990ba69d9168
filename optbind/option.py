from typing import Any, Optional, TypeVar, get_args

from attrs import field

from optbind.annotations import is_annotated, resolve_optional
from optbind.utils import frozen

T = TypeVar("T")

DEFAULT_SEPARATOR = ";"


def _separator_converter(value: Optional[str]) -> Optional[str]:
    # "\0" is accepted as an explicit "do not split".
    if not value or value == "\0":
        return None
    return value


def _single_char_validator(instance, attribute, value):
    if value is not None and len(value) != 1:
        raise ValueError(f"{attribute.alias} must be a single character; got {value!r}.")


def _no_hyphen_validator(instance, attribute, value):
    if value is not None and value.startswith("-"):
        raise ValueError(f'{attribute.alias} value must NOT start with "-".')


@frozen
class Option:
    """Command-line metadata for a single destination field, attached with :obj:`~typing.Annotated`.

    Example usage:

    .. code-block:: python

        from dataclasses import dataclass
        from typing import Annotated

        from optbind import Option, parse


        @dataclass
        class Options:
            verbose: Annotated[bool, Option("v", "verbose", help="Enable verbose output")] = False
            files: Annotated[list[str] | None, Option("f", "files", separator=",")] = None
            command: Annotated[str, Option(index=0, meta_name="COMMAND")] = ""


        result = parse("add -v --files a.txt,b.txt", Options)

    A field that has an ``index`` **and** an explicit ``short_name``/``long_name`` is
    dual-mode: it may be supplied positionally or by name.
    """

    short_name: Optional[str] = field(
        default=None,
        validator=[_single_char_validator, _no_hyphen_validator],
    )

    # Defaults to the field identifier when the catalog is built.
    long_name: Optional[str] = field(default=None, validator=_no_hyphen_validator)

    required: bool = field(default=False, kw_only=True)

    help: str = field(default="", kw_only=True)

    # Character each collection value is split on; ``None`` disables splitting.
    separator: Optional[str] = field(
        default=DEFAULT_SEPARATOR,
        converter=_separator_converter,
        validator=_single_char_validator,
        kw_only=True,
    )

    # -1 for named-only options, otherwise the positional index.
    index: int = field(default=-1, kw_only=True)

    meta_name: str = field(default="", kw_only=True)

    env_var: Optional[str] = field(default=None, kw_only=True)

    @index.validator
    def _index_validator(self, attribute, value):
        if value < -1:
            raise ValueError(f"index must be -1 (named-only) or a non-negative position; got {value}.")

    @property
    def is_positional(self) -> bool:
        return self.index >= 0

    def __str__(self):
        if self.short_name:
            return f"-{self.short_name} --{self.long_name}" if self.long_name else f"-{self.short_name}"
        if self.long_name:
            return f"--{self.long_name}"
        if self.is_positional:
            return f"<{self.meta_name or f'arg{self.index}'}>"
        return ""


def get_option(hint: Any) -> tuple[Any, Optional[Option]]:
    """At root level, checks for :class:`Option` annotations.

    Returns
    -------
    hint
        Annotation hint with :obj:`Annotated` resolved.
    Option | None
        The last :class:`Option` discovered, if any.
    """
    hint = resolve_optional(hint)
    option = None
    if is_annotated(hint):
        inner = get_args(hint)
        hint = inner[0]
        for metadata in inner[1:]:
            if isinstance(metadata, Option):
                option = metadata
    return hint, option
