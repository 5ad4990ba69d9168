import logging
from collections.abc import Sequence
from typing import Any, NamedTuple, Optional

from optbind._convert import coerce, convert_enum_flag, split_values
from optbind._env_var import env_var_split, read_env_var
from optbind.descriptor import DescriptorCatalog, FieldDescriptor, Kind
from optbind.exceptions import (
    CoercionError,
    DestinationError,
    MissingArgumentError,
    OptbindError,
    UnknownOptionError,
)
from optbind.result import ParseResult, ParseStatus
from optbind.settings import ParserSettings
from optbind.utils import UNSET, is_option_like, strip_quotes, zero_value

logger = logging.getLogger(__name__)


class _KeywordMatch(NamedTuple):
    """A named-option token split into its parts."""

    key: str
    """Option key as typed, without any ``=value`` suffix (e.g. ``--name``)."""

    descriptor: Optional[FieldDescriptor]
    """Matched descriptor; ``None`` if the key is unknown."""

    injected_value: Any
    """Value supplied with ``=`` syntax, otherwise ``UNSET``."""


def _split_key(token: str) -> tuple[str, Any]:
    """Split ``--key=value`` into key and value.

    The split only happens when the first ``=`` comes before any double quote.
    """
    eq = token.find("=")
    if eq == -1:
        return token, UNSET
    quote = token.find('"')
    if quote != -1 and quote < eq:
        return token, UNSET
    return token[:eq].strip(), token[eq + 1 :].strip()


def _strip_dashes(key: str) -> str:
    if key.startswith("--"):
        return key[2:]
    return key[1:]


def _match_key(token: str, catalog: DescriptorCatalog, settings: ParserSettings) -> _KeywordMatch:
    key, injected_value = _split_key(token)
    name = _strip_dashes(key)
    ignore_case = not settings.case_sensitive

    descriptor = None
    if len(name) == 1:
        descriptor = catalog.find_short(name, ignore_case)
    if descriptor is None and name:
        descriptor = catalog.find_long(name, ignore_case)
    return _KeywordMatch(key, descriptor, injected_value)


def _next_option_index(tokens: Sequence[str], start: int) -> int:
    for i in range(start, len(tokens)):
        if is_option_like(tokens[i]):
            return i
    return len(tokens)


def _is_bool_literal(token: str) -> bool:
    return token.strip().lower() in ("true", "false")


def convert(descriptor: FieldDescriptor, values: Sequence[str], *, case_sensitive: bool = False) -> Any:
    """Convert the values consumed for ``descriptor`` into the field's value.

    Raises
    ------
    CoercionError
        If any value fails to convert, or a scalar without a value has no zero value.
    """
    if descriptor.kind is Kind.COLLECTION:
        return [
            coerce(descriptor.element_type, v, case_sensitive=case_sensitive)
            for v in split_values([strip_quotes(v) for v in values], descriptor.separator)
        ]
    elif descriptor.kind is Kind.FLAGS:
        values = [strip_quotes(v) for v in split_values(values, descriptor.separator)]
        return convert_enum_flag(descriptor.hint, values, case_sensitive=case_sensitive)

    if values:
        return coerce(descriptor.hint, values[0], case_sensitive=case_sensitive)
    if descriptor.is_bool:
        return True
    try:
        return zero_value(descriptor.hint)
    except Exception:
        raise CoercionError(msg="a value is required.", target_type=descriptor.hint) from None


class _Binder:
    """Cursor state for one pass over a token stream."""

    def __init__(self, instance: Any, catalog: DescriptorCatalog, settings: ParserSettings):
        self.instance = instance
        self.catalog = catalog
        self.settings = settings
        self.assigned: set[str] = set()
        self.position = 0

    def _assign(self, descriptor: FieldDescriptor, value: Any, option_name: str) -> None:
        try:
            descriptor.set_value(self.instance, value)
        except (AttributeError, TypeError, ValueError) as e:
            raise DestinationError(
                msg=f'Unable to assign "{descriptor.name}": {e}',
                option_name=option_name,
            ) from e
        self.assigned.add(descriptor.name)

    def _accumulate(self, descriptor: FieldDescriptor, elements: list, option_name: str) -> None:
        existing = descriptor.get_value(self.instance) if descriptor.name in self.assigned else None
        if existing is None:
            self._assign(descriptor, descriptor.new_container(elements), option_name)
        else:
            existing.extend(elements)

    def parse_named(self, tokens: Sequence[str], i: int) -> int:
        """Bind the named option at ``tokens[i]``; returns the index of the next unprocessed token."""
        match = _match_key(tokens[i], self.catalog, self.settings)
        descriptor = match.descriptor

        if descriptor is None:
            if not self.settings.ignore_unknown_arguments:
                raise UnknownOptionError(
                    token=match.key,
                    option_name=match.key,
                    candidates=tuple(self.catalog.option_names()),
                )
            logger.debug("Ignoring unknown option %r.", match.key)
            return i + 1

        end = _next_option_index(tokens, i + 1)
        run = list(tokens[i + 1 : end])
        injected = match.injected_value is not UNSET

        if descriptor.kind is Kind.SCALAR:
            if injected:
                values, next_index = [match.injected_value], i + 1
            elif run and (not descriptor.is_bool or _is_bool_literal(run[0])):
                values, next_index = run[:1], i + 2
            else:
                values, next_index = [], i + 1
        else:
            values = ([match.injected_value] if injected else []) + run
            next_index = end

        try:
            value = convert(descriptor, values, case_sensitive=self.settings.case_sensitive)
        except CoercionError as e:
            e.option_name = match.key
            raise

        if descriptor.kind is Kind.COLLECTION:
            self._accumulate(descriptor, value, match.key)
        else:
            self._assign(descriptor, value, match.key)
        return next_index

    def parse_positional(self, token: str) -> None:
        position = self.position
        self.position += 1

        descriptor = self.catalog.find_positional(position)
        if descriptor is None:
            descriptor = self.catalog.find_last_positional_collection(position)
        if descriptor is None:
            if not self.settings.ignore_unknown_arguments:
                raise UnknownOptionError(token=token, index=position, option_name=f"arg{position}")
            logger.debug("Ignoring unknown positional argument %r at index %d.", token, position)
            return

        option_name = descriptor.meta_name or f"arg{position}"
        case_sensitive = self.settings.case_sensitive
        try:
            if descriptor.kind is Kind.COLLECTION:
                element = coerce(descriptor.element_type, token, case_sensitive=case_sensitive)
            else:
                value = convert(descriptor, [token], case_sensitive=case_sensitive)
        except CoercionError as e:
            e.option_name = option_name
            raise

        if descriptor.kind is Kind.COLLECTION:
            self._accumulate(descriptor, [element], option_name)
        else:
            self._assign(descriptor, value, option_name)

    def parse_tokens(self, tokens: Sequence[str]) -> None:
        i = 0
        while i < len(tokens):
            if is_option_like(tokens[i]):
                i = self.parse_named(tokens, i)
            else:
                self.parse_positional(tokens[i])
                i += 1

    def parse_env(self) -> None:
        """Fill fields not given on the command line from their environment variables."""
        for descriptor in self.catalog.descriptors:
            if descriptor.name in self.assigned:
                continue
            raw = read_env_var(descriptor)
            if raw is None:
                continue
            case_sensitive = self.settings.case_sensitive
            try:
                if descriptor.kind is Kind.COLLECTION:
                    # Only the "," split applies; the option's separator does not.
                    value = descriptor.new_container(
                        coerce(descriptor.element_type, piece, case_sensitive=case_sensitive)
                        for piece in env_var_split(descriptor, raw)
                    )
                else:
                    value = convert(descriptor, env_var_split(descriptor, raw), case_sensitive=case_sensitive)
                self._assign(descriptor, value, descriptor.display_name)
            except OptbindError as e:
                logger.debug("Ignoring environment variable %s=%r: %s", descriptor.env_var, raw, e)

    def missing_required(self) -> list[MissingArgumentError]:
        return [
            MissingArgumentError(option_name=descriptor.display_name)
            for descriptor in self.catalog.descriptors
            if descriptor.required and descriptor.name not in self.assigned
        ]


def bind(
    tokens: Sequence[str],
    instance: Any,
    catalog: DescriptorCatalog,
    settings: Optional[ParserSettings] = None,
) -> ParseResult:
    """Bind command-line tokens onto ``instance``.

    Tokens are processed left to right: an option-like token (leading ``-``)
    starts a named option, anything else is the next positional value.
    Afterwards, fields that weren't given fall back to their environment
    variables, then required fields are validated.

    Parameters
    ----------
    tokens: Sequence[str]
        Already-split command-line tokens.
    instance: Any
        Destination object; mutated in place.
    catalog: DescriptorCatalog
        Catalog of ``instance``'s type.
    settings: Optional[ParserSettings]
        Parser behavior; defaults to :class:`ParserSettings()`.

    Returns
    -------
    ParseResult
        ``PARSED`` if no error was recorded. The first binding error stops the
        scan; every missing required field is reported.
    """
    if settings is None:
        settings = ParserSettings()

    result = ParseResult(catalog=catalog, value=instance)
    binder = _Binder(instance, catalog, settings)

    try:
        binder.parse_tokens(tokens)
    except OptbindError as e:
        result.append_exception(e)
        return result

    binder.parse_env()

    for e in binder.missing_required():
        result.append_exception(e)

    if not result.errors:
        result.status = ParseStatus.PARSED
    return result
