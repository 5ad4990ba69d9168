from collections.abc import Iterable
from typing import Any, ClassVar, Optional, Union

from attrs import define, field

from optbind.bind import bind
from optbind.descriptor import DescriptorCatalog
from optbind.exceptions import DestinationError
from optbind.registry import CatalogRegistry, default_registry
from optbind.result import ParseResult
from optbind.settings import ParserSettings
from optbind.tokenizer import tokenize


@define
class Parser:
    """Binds command-line arguments onto annotated destination objects.

    Example usage:

    .. code-block:: python

        parser = Parser(ParserSettings(ignore_unknown_arguments=False))
        result = parser.parse("--name Alice -v", Options)
        if not result:
            result.print_errors()
    """

    settings: ParserSettings = field(factory=ParserSettings)

    registry: CatalogRegistry = field(factory=lambda: default_registry, kw_only=True)
    """Catalog cache; defaults to the process-wide registry."""

    default: ClassVar["Parser"]
    """Shared parser with default settings."""

    def __attrs_post_init__(self):
        if self.settings is None:
            self.settings = ParserSettings()

    def get_catalog(self, target: Any) -> DescriptorCatalog:
        """Catalog of a class, or of an instance's class."""
        return self.registry.get(target)

    def tokenize(self, line: str) -> list[str]:
        return tokenize(
            line,
            self.settings.strip_comments,
            comment_marker=self.settings.comment_marker,
        ).tokens

    def parse(self, arguments: Union[str, Iterable[str], None], target: Any) -> ParseResult:
        """Parse ``arguments`` into ``target``.

        Parameters
        ----------
        arguments: Union[str, Iterable[str], None]
            A raw command line (tokenized here) or already-split tokens.
        target: Any
            A class to construct freshly with no arguments, or an existing
            instance to populate. Fields of an existing instance that aren't
            touched by ``arguments`` keep their values.

        Returns
        -------
        ParseResult
            Never raises for bad input; inspect :attr:`ParseResult.errors`.
        """
        if arguments is None:
            tokens = []
        elif isinstance(arguments, str):
            tokens = self.tokenize(arguments)
        else:
            tokens = list(arguments)

        catalog = self.get_catalog(target)

        if isinstance(target, type):
            try:
                instance = target()
            except Exception as e:
                result = ParseResult(catalog=catalog)
                result.append_exception(
                    DestinationError(msg=f"Unable to create an instance of {target.__qualname__}: {e}")
                )
                return result
        else:
            instance = target

        return bind(tokens, instance, catalog, self.settings)


Parser.default = Parser()


def parse(
    arguments: Union[str, Iterable[str], None],
    target: Any,
    settings: Optional[ParserSettings] = None,
) -> ParseResult:
    """Parse with :attr:`Parser.default`, or a parser built from ``settings``."""
    parser = Parser.default if settings is None else Parser(settings)
    return parser.parse(arguments, target)
