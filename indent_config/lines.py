"""
Classifies single lines of the config format.

Each line is one of three things:
- a key line: `<indent><key>:<spaces><value><trailing comment>`
- a comment line: optional whitespace followed by `#` and anything
- a blank line: nothing but whitespace

Anything else is a structural error. The functions here are stateless; the
parser feeds them one line at a time and decides where the result belongs.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .exceptions import StructuralError

COMMENT_MARKER = "#"

# Everything before the spaces that precede the first '#', then the comment.
COMMENT_PATTERN = re.compile(r"([^#\n]*?)( *#.*)")

# indent, key (no colon, no leading space or colon), colon spacing, value.
KEY_VALUE_PATTERN = re.compile(r"( *)([^:\n ][^:\n]*):( *)([^:\n]*)")


@dataclass(frozen=True)
class KeyLine:
    indent: int
    key: str
    colon_space: int
    value: str
    comment: Optional[str] = None


@dataclass(frozen=True)
class CommentLine:
    text: str


@dataclass(frozen=True)
class BlankLine:
    indent: int


ClassifiedLine = Union[KeyLine, CommentLine, BlankLine]


def split_comment(line: str) -> Tuple[str, Optional[str]]:
    """Splits a line into its code part and its trailing comment.

    The comment keeps the spaces in front of the `#` so that the line can be
    rebuilt exactly.

    Args:
        line: A single line without its line terminator.

    Returns:
        A `(code, comment)` tuple. `comment` is None if the line has no `#`.
    """
    match = COMMENT_PATTERN.match(line)
    if match is None:
        return line, None
    return match.group(1), match.group(2)


def classify_line(line: str, line_number: int) -> ClassifiedLine:
    """Classifies one line as a key line, a comment line, or a blank line.

    Args:
        line: A single line without its line terminator.
        line_number: The 1-based number of the line, used in error messages.

    Returns:
        A `KeyLine`, `CommentLine` or `BlankLine`.

    Raises:
        StructuralError: If the line matches none of the three shapes, e.g.
            `key: value: extra` or text in front of a standalone comment.
    """
    code, comment = split_comment(line)

    match = KEY_VALUE_PATTERN.fullmatch(code)
    if match:
        indent, key, colon_space, value = match.groups()
        return KeyLine(
            indent=len(indent),
            key=key.strip(),
            colon_space=len(colon_space),
            value=value.strip(),
            comment=comment,
        )

    if comment is not None:
        if code.strip():
            raise StructuralError(line_number, code)
        return CommentLine(line)

    if not line.strip():
        # Every character counts towards the width, so the run is rebuilt as written.
        return BlankLine(len(line))

    raise StructuralError(line_number, line)
