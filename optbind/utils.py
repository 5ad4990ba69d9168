"""To prevent circular dependencies, this module should never import anything else from optbind."""

import functools
import inspect
from typing import TYPE_CHECKING, Any, Literal

# https://threeofwands.com/attra-iv-zero-overhead-frozen-attrs-classes/
if TYPE_CHECKING:
    from attrs import frozen
else:
    from attrs import define

    frozen = functools.partial(define, unsafe_hash=True)


class SentinelMeta(type):
    def __repr__(cls) -> str:
        return f"<{cls.__name__}>"

    def __bool__(cls) -> Literal[False]:
        return False


class Sentinel(metaclass=SentinelMeta):
    def __new__(cls):
        raise ValueError("Sentinel objects are not intended to be instantiated. Subclass instead.")


class UNSET(Sentinel):
    """Special sentinel value indicating that no data was provided. **Do not instantiate**."""


def is_class_and_subclass(hint, target_class) -> bool:
    """Safely check if a type is both a class and a subclass of target_class.

    Parameters
    ----------
    hint : Any
        The type to check.
    target_class : type
        The target class to check subclass relationship against.

    Returns
    -------
    bool
        True if hint is a class and is a subclass of target_class, False otherwise.
    """
    try:
        return inspect.isclass(hint) and issubclass(hint, target_class)
    except TypeError:
        # issubclass() raises TypeError for non-class arguments like Union types
        return False


def is_option_like(token: str) -> bool:
    """Checks if a token introduces a named option.

    Every token starting with ``-`` is an option introducer, including negative numbers.
    """
    return token.startswith("-")


def strip_quotes(value: str) -> str:
    """Remove one layer of double quotes that encloses the entire ``value``."""
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def equals_ignore_case(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return a is b
    return a.casefold() == b.casefold()


def zero_value(type_: Any) -> Any:
    """Instantiate ``type_`` without arguments; e.g. ``""`` for ``str`` and ``0`` for ``int``."""
    return type_()
