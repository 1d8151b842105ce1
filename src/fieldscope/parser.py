"""Tokenizer for the pipe-delimited rule declaration language.

Converts declaration strings such as ``"required|min:5|between:1:10"`` into
a list of RuleToken objects for the registry.

Grammar:
- Segments are separated by ``|``; empty segments are ignored
- A segment is ``kind`` or ``kind:param[:param...]``
- One parameter: numeric tokens that print back unchanged become int/float,
  others stay strings
- Several parameters: a list, each numeric-looking token coerced
"""

import re
from dataclasses import dataclass
from typing import Any

from fieldscope.exceptions import RuleDeclarationError

SEGMENT_SEPARATOR = "|"
PARAM_SEPARATOR = ":"

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")
_KIND_PATTERN = re.compile(r"^[A-Za-z_][\w.-]*$")


@dataclass(frozen=True)
class RuleToken:
    """A single rule reference from a declaration string.

    Attributes:
        kind: The rule kind ("required", "min", ...)
        params: Parsed parameter(s), or None when the segment has no ':'
        position: Character position of the segment in the source string
    """

    kind: str
    params: Any
    position: int

    def __repr__(self) -> str:
        return f"RuleToken({self.kind!r}, {self.params!r}, pos={self.position})"


def parse_number(text: str) -> int | float | None:
    """Parse a numeric-looking string, or return None."""
    text = text.strip()
    if _INT_PATTERN.match(text):
        return int(text)
    if _FLOAT_PATTERN.match(text):
        return float(text)
    return None


def coerce_param(raw: str) -> int | float | str:
    """Convert a numeric-looking parameter to a number, else keep the string.

    Only tokens that print back unchanged are converted, so ``007``, ``1.50``
    and ``1e3`` stay text.
    """
    number = parse_number(raw)
    if number is not None and str(number) == raw.strip():
        return number
    return raw


def tokenize_segment(segment: str, position: int = 0) -> RuleToken:
    """Tokenize a single ``kind[:params]`` segment.

    Raises:
        RuleDeclarationError: If the segment has no usable rule kind.
    """
    kind, sep, rest = segment.partition(PARAM_SEPARATOR)
    kind = kind.strip()
    if not kind or not _KIND_PATTERN.match(kind):
        raise RuleDeclarationError(
            f"Invalid rule kind {kind!r} in segment {segment!r}",
            kind=kind or None,
            position=position,
        )

    if not sep:
        return RuleToken(kind=kind, params=None, position=position)

    parts = rest.split(PARAM_SEPARATOR)
    if len(parts) == 1:
        return RuleToken(kind=kind, params=coerce_param(parts[0]), position=position)

    return RuleToken(
        kind=kind,
        params=[coerce_param(part) for part in parts],
        position=position,
    )


def tokenize(text: str) -> list[RuleToken]:
    """Tokenize a full pipe-delimited declaration.

    Raises:
        RuleDeclarationError: On the first malformed segment. Use
            iter_segments() to recover segment by segment.
    """
    return [tokenize_segment(segment, position) for segment, position in iter_segments(text)]


def iter_segments(text: str) -> list[tuple[str, int]]:
    """Split a declaration into (segment, position) pairs, skipping blanks."""
    segments: list[tuple[str, int]] = []
    position = 0
    for segment in text.split(SEGMENT_SEPARATOR):
        if segment.strip():
            segments.append((segment.strip(), position + len(segment) - len(segment.lstrip())))
        position += len(segment) + len(SEGMENT_SEPARATOR)
    return segments
