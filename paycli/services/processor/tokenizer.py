"""Split one raw command line into tokens and an optional trailing comment."""

from typing import NamedTuple

from paycli.common.errors import MalformedCommandError


COMMENT_MARKER = "#"
# The command name plus three argument slots never start a comment.
COMMENT_MIN_INDEX = 4


class ParsedLine(NamedTuple):
    tokens: list[str]
    comment: str | None = None


def parse_tokens(line: str) -> ParsedLine | None:
    """Tokenize a line; return None for blank input.

    A `#` token at index 4 or later starts a comment: the tokens after it are
    rejoined with single spaces and the marker is dropped. Earlier `#` tokens
    are ordinary arguments.
    """

    parts = line.split()
    if not parts:
        return None
    if parts[0] == COMMENT_MARKER:
        raise MalformedCommandError("Malformed command: '#' cannot start a command")

    try:
        marker_index = parts.index(COMMENT_MARKER)
    except ValueError:
        return ParsedLine(parts)

    if marker_index < COMMENT_MIN_INDEX:
        return ParsedLine(parts)
    return ParsedLine(parts[:marker_index], " ".join(parts[marker_index + 1 :]))
