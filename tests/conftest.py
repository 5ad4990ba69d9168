import pytest
from rich.console import Console

from optbind import CatalogRegistry, Parser, ParserSettings


@pytest.fixture
def registry():
    """Isolated catalog cache."""
    return CatalogRegistry()


@pytest.fixture
def parser(registry):
    return Parser(registry=registry)


@pytest.fixture
def strict_parser(registry):
    """Parser that rejects unknown arguments."""
    return Parser(ParserSettings(ignore_unknown_arguments=False), registry=registry)


@pytest.fixture
def console():
    return Console(width=70, force_terminal=True, highlight=False, color_system=None, legacy_windows=False)


@pytest.fixture
def assert_parse(parser):
    """Parse ``cmd`` into ``type_`` and check the resulting field values."""

    def inner(type_, cmd, **expected):
        result = parser.parse(cmd, type_)
        assert result.errors == []
        assert result.parsed
        for name, value in expected.items():
            assert getattr(result.value, name) == value, name
        return result.value

    return inner
