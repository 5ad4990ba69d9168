from dataclasses import dataclass, field
from enum import Enum, Flag, auto
from typing import Annotated, Optional

from optbind import DefaultFormatter, Option, PlainFormatter, get_help_text
from optbind.help import build_help_panels


class Mode(Enum):
    FAST = 1
    SLOW = 2


class Access(Flag):
    READ = auto()
    WRITE = auto()


@dataclass
class HelpOptions:
    command: Annotated[str, Option(index=0, meta_name="COMMAND", required=True, help="Command to run")] = ""
    files: Annotated[Optional[list[str]], Option(index=1)] = None
    verbose: Annotated[bool, Option("v", "verbose", help="Verbose output.")] = False
    count: Annotated[int, Option("c", help="Repeat count")] = 3
    mode: Annotated[Mode, Option()] = Mode.FAST
    access: Annotated[Access, Option(env_var="ACCESS")] = Access(0)
    tags: Annotated[list[str], Option(separator=",")] = field(default_factory=lambda: ["a", "b"])


def _line(name, description):
    return f"    {name:<43}{description}"


def test_help_plain(registry):
    actual = get_help_text(HelpOptions, registry=registry)
    expected = "\n".join(
        [
            "Positional Arguments:",
            _line("<COMMAND>", "[Index:0] Command to run. usage: <COMMAND>"),
            _line("<arg1>", "[Optional,Index:1,Array] usage: <arg1>"),
            "",
            "Options:",
            _line("-v, --verbose", "[Optional] Verbose output."),
            _line("-c, --count", "[Optional,Default:3] Repeat count."),
            _line("--mode", "[Optional,Enum,Default:FAST] usage: --mode FAST SLOW"),
            _line("--access", "[Optional,Flags,Env:ACCESS] usage: --access READ WRITE"),
            _line("--tags", "[Optional,Array,Default:a,b] usage: --tags str1 str2"),
            "",
        ]
    )
    assert actual == expected


def test_help_instance_target(registry):
    assert get_help_text(HelpOptions(), registry=registry) == get_help_text(HelpOptions, registry=registry)


def test_help_no_positional_section(registry):
    @dataclass
    class NamedOnly:
        name: Annotated[str, Option("n")] = ""

    actual = get_help_text(NamedOnly, registry=registry)
    assert actual == "Options:\n" + _line("-n, --name", "[Optional]") + "\n"


def test_help_dual_mode_in_both_sections(registry):
    @dataclass
    class Dual:
        source: Annotated[str, Option("s", "source", index=0, help="Input")] = ""

    panels = build_help_panels(registry.get(Dual))
    assert [p.title for p in panels] == ["Positional Arguments", "Options"]
    assert panels[0].entries[0].name == "<arg0>"
    assert panels[1].entries[0].name == "-s, --source"


def test_help_long_name_overflows_column(registry):
    @dataclass
    class LongName:
        an_extremely_long_option_name_that_overflows: Annotated[int, Option()] = 0

    actual = get_help_text(LongName, PlainFormatter(indent_width=2, name_width=10), registry=registry)
    assert actual == "Options:\n  --an_extremely_long_option_name_that_overflows [Optional]\n"


def test_help_default_instance_unavailable(registry):
    class NoDefault:
        count: Annotated[int, Option()] = 5

        def __init__(self, count):
            self.count = count

    actual = get_help_text(NoDefault, registry=registry)
    assert "Default" not in actual


def test_help_rich_formatter(registry):
    actual = get_help_text(HelpOptions, DefaultFormatter(width=100), registry=registry)
    lines = actual.splitlines()
    assert lines[0].startswith("╭─ Positional Arguments ")
    assert all(len(line) == 100 for line in lines)
    assert any("<COMMAND>" in line and "Command to run." in line for line in lines)
    assert any("-c, --count" in line and "[Optional,Default:3]" in line for line in lines)
    assert any(line.startswith("╭─ Options ") for line in lines)
