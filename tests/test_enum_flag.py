from dataclasses import dataclass
from enum import Flag, auto
from typing import Annotated

import pytest

from optbind import CoercionError, ErrorKind, Option
from optbind._convert import convert_enum_flag, flag_members


class Permission(Flag):
    READ = auto()
    WRITE = auto()
    EXECUTE = auto()


@dataclass
class FlagOptions:
    access: Annotated[Permission, Option("a")] = Permission(0)
    mode: Annotated[Permission, Option(separator=",")] = Permission.READ
    name: Annotated[str, Option()] = ""


@pytest.mark.parametrize(
    "cmd, expected",
    [
        ("--access Read", Permission.READ),
        ("--access Read Write", Permission.READ | Permission.WRITE),
        ("-a read execute", Permission.READ | Permission.EXECUTE),
        ("--access Read;Write;Execute", Permission.READ | Permission.WRITE | Permission.EXECUTE),
        ("--access=Write", Permission.WRITE),
        ("--access READ, WRITE", Permission.READ | Permission.WRITE),
    ],
)
def test_flags(assert_parse, cmd, expected):
    assert_parse(FlagOptions, cmd, access=expected)


def test_flags_custom_separator(assert_parse):
    assert_parse(FlagOptions, "--mode Write,Execute", mode=Permission.WRITE | Permission.EXECUTE)


def test_flags_stop_at_next_option(assert_parse):
    assert_parse(FlagOptions, "--access Read Write --name x", access=Permission.READ | Permission.WRITE, name="x")


def test_flags_repeated_replaces(assert_parse):
    assert_parse(FlagOptions, "--access Read --access Write", access=Permission.WRITE)


def test_flags_invalid_member(parser):
    result = parser.parse("--access Read Delete", FlagOptions)
    assert not result
    assert result.errors[0].kind is ErrorKind.INVALID_VALUE
    assert result.errors[0].option_name == "--access"


def test_flags_no_value(parser):
    result = parser.parse("--access", FlagOptions)
    assert result.errors[0].kind is ErrorKind.INVALID_VALUE


def test_convert_enum_flag_case_sensitive():
    assert convert_enum_flag(Permission, ["READ"], case_sensitive=True) is Permission.READ
    with pytest.raises(CoercionError):
        convert_enum_flag(Permission, ["read"], case_sensitive=True)


def test_flag_members():
    assert flag_members(Permission.READ | Permission.EXECUTE) == [Permission.READ, Permission.EXECUTE]
    assert flag_members(Permission(0)) == []
