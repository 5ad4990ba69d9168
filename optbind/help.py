"""Help-text generation from a :class:`~optbind.descriptor.DescriptorCatalog`."""

import io
from typing import TYPE_CHECKING, Any, Optional, Protocol

from attrs import field

from optbind._convert import to_display_string
from optbind.annotations import get_hint_name, is_enum
from optbind.descriptor import DescriptorCatalog, FieldDescriptor, Kind
from optbind.registry import CatalogRegistry, default_registry
from optbind.utils import frozen

if TYPE_CHECKING:
    from rich.console import RenderableType

DEFAULT_INDENT = 4
DEFAULT_NAME_WIDTH = 43

# Default values that convey nothing beyond the field's type.
_TRIVIAL_DEFAULTS = frozenset({"", "0", "False"})


@frozen
class HelpEntry:
    """One row of a help panel."""

    name: str
    """Display label; e.g. ``-v, --verbose`` or ``<FILE>``."""

    attributes: tuple[str, ...] = field(factory=tuple)
    """Bracketed metadata; e.g. ``("Optional", "Default:3")``."""

    help: str = ""

    usage: str = ""


@frozen
class HelpPanel:
    title: str
    entries: tuple[HelpEntry, ...] = field(factory=tuple)


class HelpFormatter(Protocol):
    def __call__(self, panels: list[HelpPanel]) -> str: ...


def _default_string(descriptor: FieldDescriptor, catalog: DescriptorCatalog) -> str:
    if catalog.default_instance is None:
        return ""
    value = descriptor.get_value(catalog.default_instance)
    if value is None:
        return ""
    if descriptor.kind is Kind.COLLECTION:
        out = (descriptor.separator or " ").join(to_display_string(x) for x in value)
    else:
        out = to_display_string(value)
    if out in _TRIVIAL_DEFAULTS or out == get_hint_name(descriptor.hint):
        return ""
    return out


def _attributes(descriptor: FieldDescriptor, catalog: DescriptorCatalog) -> tuple[str, ...]:
    out = []
    if not descriptor.required:
        out.append("Optional")
    if descriptor.is_positional:
        out.append(f"Index:{descriptor.index}")
    if descriptor.kind is Kind.COLLECTION:
        out.append("Array")
    if descriptor.kind is Kind.FLAGS:
        out.append("Flags")
    elif is_enum(descriptor.hint):
        out.append("Enum")
    if default := _default_string(descriptor, catalog):
        out.append(f"Default:{default}")
    if descriptor.env_var:
        out.append(f"Env:{descriptor.env_var}")
    return tuple(out)


def _usage(descriptor: FieldDescriptor, positional: bool) -> str:
    if positional:
        return f"<{descriptor.positional_label}>"
    if descriptor.kind is Kind.FLAGS or is_enum(descriptor.hint):
        return f"--{descriptor.long_name} " + " ".join(descriptor.hint.__members__)
    if descriptor.kind is Kind.COLLECTION:
        element = get_hint_name(descriptor.element_type)
        return f"--{descriptor.long_name} {element}1 {element}2"
    return ""


def build_help_panels(catalog: DescriptorCatalog) -> list[HelpPanel]:
    """Positional arguments first, then named options; empty sections are omitted."""
    panels = []
    if catalog.positional:
        entries = tuple(
            HelpEntry(
                name=f"<{d.positional_label}>",
                attributes=_attributes(d, catalog),
                help=d.help,
                usage=_usage(d, positional=True),
            )
            for d in catalog.positional
        )
        panels.append(HelpPanel("Positional Arguments", entries))
    if catalog.named:
        entries = tuple(
            HelpEntry(
                name=f"-{d.short_name}, --{d.long_name}" if d.short_name else f"--{d.long_name}",
                attributes=_attributes(d, catalog),
                help=d.help,
                usage=_usage(d, positional=False),
            )
            for d in catalog.named
        )
        panels.append(HelpPanel("Options", entries))
    return panels


def _description(entry: HelpEntry) -> str:
    parts = []
    if entry.attributes:
        parts.append("[" + ",".join(entry.attributes) + "]")
    if entry.help:
        parts.append(entry.help if entry.help.endswith(".") else entry.help + ".")
    if entry.usage:
        parts.append(f"usage: {entry.usage}")
    return " ".join(parts)


class PlainFormatter:
    """Fixed-column plain text help.

    .. code-block:: text

        Options:
            -v, --verbose                              [Optional] Verbose output.

    Parameters
    ----------
    indent_width : int
        Number of spaces to indent entries.
    name_width : int
        Column at which descriptions start (relative to the indent).
        Longer names are followed by a single space.
    """

    def __init__(self, indent_width: int = DEFAULT_INDENT, name_width: int = DEFAULT_NAME_WIDTH):
        self.indent = " " * indent_width
        self.name_width = name_width

    def _format_entry(self, entry: HelpEntry) -> str:
        padding = " " * max(self.name_width - len(entry.name), 1)
        return f"{self.indent}{entry.name}{padding}{_description(entry)}".rstrip()

    def __call__(self, panels: list[HelpPanel]) -> str:
        sections = []
        for panel in panels:
            lines = [f"{panel.title}:"]
            lines.extend(self._format_entry(entry) for entry in panel.entries)
            sections.append("\n".join(lines) + "\n")
        return "\n".join(sections)


class DefaultFormatter:
    """Rich help: one rounded panel per section with a two-column table.

    Rendered without color, so the output is plain text suitable for any stream.

    Parameters
    ----------
    width : int
        Total render width.
    """

    def __init__(self, width: int = 80):
        self.width = width

    def _render_panel(self, help_panel: HelpPanel) -> "RenderableType":
        from rich import box
        from rich.panel import Panel
        from rich.table import Table

        table = Table.grid(padding=(0, 2), expand=True)
        table.add_column("name", no_wrap=True, style="cyan")
        table.add_column("description", ratio=1)
        for entry in help_panel.entries:
            table.add_row(entry.name, _description(entry))

        return Panel(
            table,
            title=help_panel.title,
            box=box.ROUNDED,
            expand=True,
            title_align="left",
        )

    def __call__(self, panels: list[HelpPanel]) -> str:
        from rich.console import Console

        console = Console(
            file=io.StringIO(),
            width=self.width,
            color_system=None,
            force_terminal=False,
            highlight=False,
            markup=False,
            emoji=False,
            legacy_windows=False,
        )
        with console.capture() as capture:
            for panel in panels:
                console.print(self._render_panel(panel))
        return capture.get()


def get_help_text(
    target: Any,
    formatter: Optional[HelpFormatter] = None,
    *,
    registry: Optional[CatalogRegistry] = None,
) -> str:
    """Human-readable help for a destination class or instance.

    Parameters
    ----------
    target: Any
        Destination class or instance.
    formatter: Optional[HelpFormatter]
        Defaults to :class:`PlainFormatter`.
    registry: Optional[CatalogRegistry]
        Catalog source; defaults to the process-wide registry.
    """
    if registry is None:
        registry = default_registry
    if formatter is None:
        formatter = PlainFormatter()
    return formatter(build_help_panels(registry.get(target)))
