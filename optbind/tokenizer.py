import logging
import re
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

# Word characters, whitespace and the punctuation a command line may reasonably hold.
_ALLOWED = re.compile(r"""[\w\s\-=.,:;/\\"'@#%+*~!?()\[\]{}$^&]""")


class Tokenized(NamedTuple):
    tokens: list[str]
    """Split command-line tokens."""

    illegal_char: Optional[str]
    """First character outside the allowed set, if any."""


def _finish(raw: str) -> str:
    # Only a quote pair spanning the whole token is removed.
    if len(raw) >= 2 and raw[0] == '"' and raw[-1] == '"' and '"' not in raw[1:-1]:
        return raw[1:-1]
    return raw


def tokenize(line: str, strip_comments: bool = False, *, comment_marker: str = "#") -> Tokenized:
    """Split a raw command line into tokens.

    Whitespace separates tokens except inside double quotes. A token that is
    wholly enclosed by one pair of double quotes has the pair removed; any other
    quotes are kept literally, so ``--config="key=value"`` stays a single token.

    Parameters
    ----------
    line: str
        Raw command line.
    strip_comments: bool
        Truncate the line at the first ``comment_marker`` outside quotes.
    comment_marker: str
        Comment introducer.

    Returns
    -------
    Tokenized
        The tokens and the first illegal character encountered.
        Illegal characters are reported but kept in their tokens.
    """
    tokens = []
    illegal_char = None
    current = []
    in_token = False
    in_quotes = False

    for i, char in enumerate(line):
        if illegal_char is None and not _ALLOWED.fullmatch(char):
            illegal_char = char

        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
            in_token = True
        elif in_quotes:
            current.append(char)
        elif strip_comments and comment_marker and line.startswith(comment_marker, i):
            break
        elif char.isspace():
            if in_token:
                tokens.append(_finish("".join(current)))
                current = []
                in_token = False
        else:
            current.append(char)
            in_token = True

    if in_token:
        tokens.append(_finish("".join(current)))

    if illegal_char is not None:
        logger.debug("Illegal character %r in command line %r.", illegal_char, line)

    return Tokenized(tokens, illegal_char)
