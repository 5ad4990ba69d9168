__version__ = "0.1.0"

__all__ = [
    "CatalogRegistry",
    "CoercionError",
    "DefaultFormatter",
    "DescriptorCatalog",
    "DestinationError",
    "ErrorKind",
    "ErrorPanel",
    "FieldDescriptor",
    "FormatMethod",
    "Kind",
    "MissingArgumentError",
    "OptbindError",
    "Option",
    "ParseError",
    "ParseResult",
    "ParseStatus",
    "Parser",
    "ParserSettings",
    "PlainFormatter",
    "Tokenized",
    "UnknownOptionError",
    "format_command_line",
    "format_command_line_args",
    "get_catalog",
    "get_help_text",
    "parse",
    "tokenize",
]

from optbind.descriptor import DescriptorCatalog, FieldDescriptor, Kind
from optbind.exceptions import (
    CoercionError,
    DestinationError,
    ErrorKind,
    MissingArgumentError,
    OptbindError,
    UnknownOptionError,
)
from optbind.formatting import FormatMethod, format_command_line, format_command_line_args
from optbind.help import DefaultFormatter, PlainFormatter, get_help_text
from optbind.option import Option
from optbind.panel import ErrorPanel
from optbind.parser import Parser, parse
from optbind.registry import CatalogRegistry, get_catalog
from optbind.result import ParseError, ParseResult, ParseStatus
from optbind.settings import ParserSettings
from optbind.tokenizer import Tokenized, tokenize
