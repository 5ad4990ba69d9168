import operator
import re
from collections.abc import Callable, Iterable, Sequence
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum, Flag
from functools import reduce
from typing import Any, Optional

from optbind.annotations import is_enum, is_enum_flag, resolve
from optbind.exceptions import CoercionError
from optbind.utils import equals_ignore_case, strip_quotes


def _bool(s: str) -> bool:
    # Anything other than "true" is False; never a coercion failure.
    return s.strip().lower() == "true"


def _int(s: str) -> int:
    s = s.strip().lower()
    if s.startswith("0x"):
        return int(s, 16)
    elif s.startswith("0o"):
        return int(s, 8)
    elif s.startswith("0b"):
        return int(s, 2)
    else:
        return int(s)


def _float(s: str) -> float:
    return float(s.strip())


def _decimal(s: str) -> Decimal:
    return Decimal(s.strip())


def _date(s: str) -> date:
    """Parse a date string.

    Returns
    -------
    datetime.date
    """
    return date.fromisoformat(s.strip())


def _datetime(s: str) -> datetime:
    """Parse a datetime string.

    Returns
    -------
    datetime.datetime
    """
    formats = [
        # ISO 8601 formats (unambiguous internationally)
        "%Y-%m-%d",  # 1956-01-31
        "%Y-%m-%dT%H:%M:%S",  # 1956-01-31T10:00:00
        "%Y-%m-%d %H:%M:%S",  # 1956-01-31 10:00:00
        "%Y-%m-%dT%H:%M:%S%z",  # 1956-01-31T10:00:00+0000
        "%Y-%m-%dT%H:%M:%S.%f",  # 1956-01-31T10:00:00.123456
        "%Y-%m-%dT%H:%M:%S.%f%z",  # 1956-01-31T10:00:00.123456+0000
    ]

    for fmt in formats:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue

    raise ValueError


def _timedelta(s: str) -> timedelta:
    """Parse a timedelta string."""
    negative = False
    if s.startswith("-"):
        negative = True
        s = s[1:]

    matches = re.findall(r"((\d+\.\d+|\d+)([smhdw]))", s)

    if not matches:
        raise ValueError(f"Could not parse duration string: {s}")

    seconds = 0
    for _, value, unit in matches:
        value = float(value)
        if unit == "s":
            seconds += value
        elif unit == "m":
            seconds += value * 60
        elif unit == "h":
            seconds += value * 3600
        elif unit == "d":
            seconds += value * 86400
        elif unit == "w":
            seconds += value * 604800

    if negative:
        seconds = -seconds
    return timedelta(seconds=seconds)


# For types that need more logic than just invoking their type
_converters: dict[Any, Callable[[str], Any]] = {
    bool: _bool,
    int: _int,
    float: _float,
    Decimal: _decimal,
    date: _date,
    datetime: _datetime,
    timedelta: _timedelta,
}


def get_enum_member(type_: type[Enum], value: str, *, case_sensitive: bool = False) -> Enum:
    """Match a value to an enum's member by name, falling back to the member's integer value."""
    value = value.strip()
    for name, member in type_.__members__.items():
        if name == value or (not case_sensitive and equals_ignore_case(name, value)):
            return member

    try:
        return type_(int(value))
    except ValueError:
        pass
    raise CoercionError(token=value, target_type=type_)


def convert_enum_flag(enum_type: type[Flag], values: Iterable[str], *, case_sensitive: bool = False) -> Flag:
    """Combine comma separated member names into a single :class:`~enum.Flag` value.

    Parameters
    ----------
    enum_type : type[Flag]
        The Flag enum type to convert to.
    values : Iterable[str]
        Member names; each value may itself hold several comma separated names.
    case_sensitive : bool
        Whether member names must match exactly.

    Returns
    -------
    Flag
        The combined flag value.

    Raises
    ------
    CoercionError
        If a name is not a valid flag member, or no names were given at all.
        Empty names (e.g. from ``"READ,,WRITE"``) are skipped.
    """
    text = ", ".join(x.strip() for x in values)
    names = [x.strip() for x in text.split(",") if x.strip()]
    if not names:
        raise CoercionError(token=text, target_type=enum_type)
    members = []
    for name in names:
        try:
            members.append(get_enum_member(enum_type, name, case_sensitive=case_sensitive))
        except CoercionError:
            raise CoercionError(token=text, target_type=enum_type) from None
    return reduce(operator.or_, members, enum_type(0))


def coerce(type_: Any, value: str, *, case_sensitive: bool = False) -> Any:
    """Coerce a single command-line string into ``type_``.

    One layer of double quotes enclosing the whole ``value`` is removed first.

    Parameters
    ----------
    type_: Type
        A type hint to coerce ``value`` into.
    value: str
        String token to coerce.
    case_sensitive: bool
        Whether enum member names must match exactly.

    Raises
    ------
    CoercionError
        On format, overflow, or invalid-cast problems.
    """
    type_ = resolve(type_)
    value = strip_quotes(value)

    if type_ is Any:
        type_ = str

    if is_enum_flag(type_):
        return convert_enum_flag(type_, [value], case_sensitive=case_sensitive)
    elif is_enum(type_):
        return get_enum_member(type_, value, case_sensitive=case_sensitive)

    try:
        return _converters.get(type_, type_)(value)
    except CoercionError as e:
        if e.target_type is None:
            e.target_type = type_
        if e.token is None:
            e.token = value
        raise
    except (ValueError, TypeError, OverflowError, ArithmeticError, InvalidOperation):
        raise CoercionError(token=value, target_type=type_) from None


def split_values(values: Sequence[str], separator: Optional[str]) -> list[str]:
    """Expand each value on ``separator``, trimming pieces and discarding empties.

    Values that don't contain the separator pass through as a single piece.
    """
    if separator is None or not values:
        return list(values)
    return [piece.strip() for value in values for piece in value.split(separator) if piece.strip()]


def flag_members(value: Flag) -> list[Flag]:
    """Single-bit members set in ``value``, in definition order."""
    return [
        member
        for member in type(value).__members__.values()
        if member.value and not (member.value & (member.value - 1)) and member in value
    ]


def _format_timedelta(value: timedelta) -> str:
    """Render ``value`` in the duration grammar :func:`_timedelta` parses; e.g. ``1d90s``."""
    sign = "-" if value < timedelta(0) else ""
    value = abs(value)
    out = f"{value.days}d" if value.days else ""
    if value.microseconds:
        out += f"{value.seconds}.{value.microseconds:06d}s"
    elif value.seconds or not out:
        out += f"{value.seconds}s"
    return sign + out


def to_display_string(value: Any) -> str:
    """Inverse of :func:`coerce` for display; enums render as member names."""
    if isinstance(value, Flag):
        return ", ".join(m.name for m in flag_members(value))  # pyright: ignore[reportArgumentType]
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, timedelta):
        return _format_timedelta(value)
    return str(value)
