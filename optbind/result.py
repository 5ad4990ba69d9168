from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar

from attrs import define, field

from optbind.exceptions import ErrorKind, OptbindError
from optbind.panel import ErrorPanel

if TYPE_CHECKING:
    from rich.console import Console

    from optbind.descriptor import DescriptorCatalog

T = TypeVar("T")


class ParseStatus(Enum):
    PARSED = "Parsed"
    NOT_PARSED = "NotParsed"


@define(frozen=True)
class ParseError:
    """One structured error record of a :class:`ParseResult`."""

    option_name: str
    kind: ErrorKind
    message: str

    exception: Optional[OptbindError] = field(default=None, eq=False, repr=False, kw_only=True)
    """Exception the record was created from, if any."""

    def __str__(self):
        return self.message


@define
class ParseResult(Generic[T]):
    """Outcome of a single parse call.

    Callers always receive a result; errors never escape the parse as exceptions.
    Use :meth:`raise_for_errors` to opt into exceptions.
    """

    catalog: Optional["DescriptorCatalog"] = None
    """Catalog of the destination type."""

    value: Optional[T] = None
    """The (possibly partially populated) destination object."""

    status: ParseStatus = ParseStatus.NOT_PARSED

    errors: list[ParseError] = field(factory=list)
    """Structured errors in the order they were recorded."""

    @property
    def parsed(self) -> bool:
        return self.status is ParseStatus.PARSED

    @property
    def error_message(self) -> str:
        """All error messages, newline separated."""
        return "\n".join(e.message for e in self.errors)

    def append_error(
        self,
        message: str,
        option_name: str = "",
        kind: ErrorKind = ErrorKind.GENERAL,
    ) -> ParseError:
        error = ParseError(option_name, kind, message)
        self.errors.append(error)
        return error

    def append_exception(self, exc: OptbindError) -> ParseError:
        error = ParseError(exc.option_name, exc.kind, str(exc), exception=exc)
        self.errors.append(error)
        return error

    def raise_for_errors(self) -> None:
        """Raise the first recorded error, if any.

        Raises
        ------
        OptbindError
            The first error's originating exception; a plain :class:`OptbindError`
            for records appended without one.
        """
        if not self.errors:
            return
        first = self.errors[0]
        if first.exception is not None:
            raise first.exception
        raise OptbindError(msg=first.message, option_name=first.option_name)

    def print_errors(self, console: Optional["Console"] = None) -> None:
        """Display all error messages inside a rich error panel."""
        if not self.errors:
            return
        if console is None:
            from rich.console import Console

            console = Console(stderr=True)
        console.print(ErrorPanel(self.error_message))

    def __bool__(self):
        return self.parsed
