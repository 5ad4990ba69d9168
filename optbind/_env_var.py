import os
from typing import Optional

from optbind.descriptor import FieldDescriptor, Kind


def env_var_split(descriptor: FieldDescriptor, val: str, *, delimiter: str = ",") -> list[str]:
    """Kind-dependent environment variable value splitting.

    Collections always split on ``delimiter`` (independent of the option's own
    ``separator``); pieces are stripped and empty pieces discarded.
    Every other kind receives ``val`` as a single token.

    Parameters
    ----------
    descriptor: FieldDescriptor
        Field the value will be bound to.
    val: str
        Raw environment variable value.
    delimiter: str
        Delimiter to split ``val`` on.

    Returns
    -------
    list[str]
        List of individual string tokens.
    """
    if descriptor.kind is Kind.COLLECTION:
        return [x.strip() for x in val.split(delimiter) if x.strip()]
    return [val]


def read_env_var(descriptor: FieldDescriptor) -> Optional[str]:
    """Value of the descriptor's environment variable; ``None`` if undeclared, unset or empty."""
    if not descriptor.env_var:
        return None
    return os.environ.get(descriptor.env_var) or None
