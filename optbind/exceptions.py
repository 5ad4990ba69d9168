from enum import Enum
from typing import Any, ClassVar, Optional

from attrs import define, field

from optbind.annotations import get_hint_name, is_enum

__all__ = [
    "CoercionError",
    "DestinationError",
    "ErrorKind",
    "MissingArgumentError",
    "OptbindError",
    "UnknownOptionError",
]


class ErrorKind(Enum):
    """Category of a parse error."""

    MISSING_REQUIRED = "MissingRequired"
    UNKNOWN_OPTION = "UnknownOption"
    INVALID_VALUE = "InvalidValue"
    GENERAL = "General"


@define(kw_only=True)
class OptbindError(Exception):
    """Root exception for runtime errors.

    The binding engine raises these internally and records them on the
    :class:`~optbind.ParseResult`; they only escape to the caller through
    :meth:`~optbind.ParseResult.raise_for_errors`.
    """

    msg: Optional[str] = None
    """
    If set, override automatic message generation.
    """

    option_name: str = ""
    """
    Option or positional label the error is about (e.g. ``--name`` or ``arg0``).
    """

    kind: ClassVar[ErrorKind] = ErrorKind.GENERAL

    def __str__(self):
        return self.msg if self.msg is not None else ""


@define(kw_only=True)
class DestinationError(OptbindError):
    """The destination object could not be created or assigned to."""


@define(kw_only=True)
class UnknownOptionError(OptbindError):
    """Unknown/unregistered option provided by the command line.

    A nearest-neighbor option suggestion may be appended.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN_OPTION

    token: str
    """Token without a matching field."""

    index: Optional[int] = None
    """Positional index, if the token was supplied positionally."""

    candidates: tuple[str, ...] = field(factory=tuple)
    """Option spellings that would have been accepted."""

    def __str__(self):
        if self.msg is not None:
            return self.msg

        if self.index is not None:
            return f"Unknown positional argument at index {self.index}: {self.token}"

        response = f"Unknown option: {self.token}"
        if self.candidates:
            import difflib

            close_matches = difflib.get_close_matches(self.token, self.candidates, n=1, cutoff=0.6)
            if close_matches:
                response += f'. Did you mean "{close_matches[0]}"?'
        return response


@define(kw_only=True)
class CoercionError(OptbindError):
    """There was an error performing automatic type coercion."""

    kind: ClassVar[ErrorKind] = ErrorKind.INVALID_VALUE

    token: Optional[str] = None
    """
    Input token that couldn't be coerced.
    """

    target_type: Any = None
    """
    Intended type to coerce into.
    """

    def __str__(self):
        if self.msg is not None:
            if not self.option_name:
                return self.msg
            return f'Invalid value for "{self.option_name}": {self.msg}'

        if is_enum(self.target_type):
            choices = "{" + ", ".join(self.target_type.__members__) + "}"
            target_type_name = f"one of {choices}"
        elif self.target_type is None:
            target_type_name = "the expected type"
        else:
            target_type_name = get_hint_name(self.target_type)

        if self.option_name:
            return f'Invalid value for "{self.option_name}": unable to convert "{self.token}" into {target_type_name}.'
        return f'Unable to convert "{self.token}" into {target_type_name}.'


@define(kw_only=True)
class MissingArgumentError(OptbindError):
    """A required option was not provided."""

    kind: ClassVar[ErrorKind] = ErrorKind.MISSING_REQUIRED

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return f"Required option '{self.option_name}' is missing."
