"""Lexical helpers shared by the math and text preprocessors.

Recognizes the fragments embedded in an expression string:

- double-quoted text literals, with \\" and \\\\ escapes;
- call fragments, either free (`Random(10)`) or object-bound
  (`Player.Variable(Life)`), with balanced parentheses;
- top-level separators (argument commas, text "+" concatenation).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from gamexpr.core.errors import ExpressionSyntaxError

_NAME_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?")
_QUOTE = '"'
_ESCAPE = "\\"


@dataclass(frozen=True)
class CallFragment:
    """A `Name(args)` or `Object.Member(args)` fragment of an expression.

    Attributes:
        name: Dotted or plain name before the parenthesis.
        start: Index of the first character of the name.
        end: Index just past the closing parenthesis.
        arguments: Raw, stripped argument strings (empty for `Name()`).
        source: The fragment text, verbatim.
    """

    name: str
    start: int
    end: int
    arguments: list[str] = field(default_factory=list)
    source: str = ""

    @property
    def object_name(self) -> Optional[str]:
        """Object prefix of an object-bound call, None for free calls."""
        if "." not in self.name:
            return None
        return self.name.split(".", 1)[0]

    @property
    def member(self) -> str:
        """Function name without the object prefix."""
        return self.name.rsplit(".", 1)[-1]


def find_text_literal_end(text: str, start: int) -> int:
    """Return the index just past the literal opening at `start`.

    Raises:
        ExpressionSyntaxError: If the literal is not terminated.
    """
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == _ESCAPE:
            i += 2
            continue
        if ch == _QUOTE:
            return i + 1
        i += 1
    raise ExpressionSyntaxError(f"Unterminated text literal at position {start}")


def unescape_text_literal(literal: str) -> str:
    """Strip surrounding quotes from a literal and resolve its escapes."""
    body = literal[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == _ESCAPE and i + 1 < len(body):
            out.append(body[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def strip_text_literals(text: str) -> str:
    """Replace every text literal by an empty one.

    Never raises: an unterminated literal swallows the rest of the string.
    """
    out: list[str] = []
    i = 0
    while i < len(text):
        if text[i] == _QUOTE:
            try:
                i = find_text_literal_end(text, i)
            except ExpressionSyntaxError:
                i = len(text)
            out.append('""')
            continue
        out.append(text[i])
        i += 1
    return "".join(out)


def find_closing_paren(text: str, open_index: int) -> int:
    """Return the index of the parenthesis closing the one at `open_index`.

    Parentheses inside text literals are ignored.

    Raises:
        ExpressionSyntaxError: If the parenthesis is never closed.
    """
    depth = 0
    i = open_index
    while i < len(text):
        ch = text[i]
        if ch == _QUOTE:
            i = find_text_literal_end(text, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise ExpressionSyntaxError(f"Unbalanced parenthesis at position {open_index}")


def split_top_level(text: str, separator: str) -> list[str]:
    """Split on `separator` occurrences outside parentheses and literals.

    Pieces are stripped of surrounding whitespace; empty pieces are kept so
    callers can reject them.
    """
    pieces: list[str] = []
    depth = 0
    last = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == _QUOTE:
            i = find_text_literal_end(text, i)
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == separator and depth == 0:
            pieces.append(text[last:i].strip())
            last = i + 1
        i += 1
    pieces.append(text[last:].strip())
    return pieces


def starts_name(text: str, pos: int) -> bool:
    """True if a name begins at `pos`, i.e. not inside a number or a name."""
    ch = text[pos]
    if not (ch.isascii() and (ch.isalpha() or ch == "_")):
        return False
    if pos == 0:
        return True
    prev = text[pos - 1]
    return not (prev.isalnum() or prev in "_.")


def match_name(text: str, pos: int) -> Optional[re.Match]:
    """Match a plain or dotted name at `pos`."""
    return _NAME_RE.match(text, pos)


def match_call(text: str, pos: int) -> Optional[CallFragment]:
    """Match a call fragment starting at `pos`.

    Returns:
        The fragment, or None when no name is followed by "(".

    Raises:
        ExpressionSyntaxError: If the call's parentheses are unbalanced.
    """
    name_match = match_name(text, pos)
    if name_match is None:
        return None
    i = name_match.end()
    while i < len(text) and text[i].isspace():
        i += 1
    if i >= len(text) or text[i] != "(":
        return None

    close = find_closing_paren(text, i)
    inner = text[i + 1 : close]
    arguments = split_top_level(inner, ",") if inner.strip() else []
    if any(not arg for arg in arguments):
        raise ExpressionSyntaxError(f"Empty argument in call {name_match.group()}")

    return CallFragment(
        name=name_match.group(),
        start=pos,
        end=close + 1,
        arguments=arguments,
        source=text[pos : close + 1],
    )
