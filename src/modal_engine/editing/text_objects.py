"""Text objects: spans derived from the cursor for ``i``/``a`` selections.

'i' prefix = inner (delimiters and surrounding blanks excluded)
'a' prefix = around (delimiters, or trailing/leading blanks, included)
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from modal_engine.buffer.document import BufferDocument

from .chars import BLANK, char_class
from .types import Span


class TextObjectKind(str, Enum):
    WORD = "w"
    BIG_WORD = "W"
    DOUBLE_QUOTE = '"'
    SINGLE_QUOTE = "'"
    BACKTICK = "`"
    PAREN = "("
    BRACKET = "["
    BRACE = "{"
    ANGLE = "<"


ALIASES = {
    ")": TextObjectKind.PAREN,
    "b": TextObjectKind.PAREN,
    "]": TextObjectKind.BRACKET,
    "}": TextObjectKind.BRACE,
    "B": TextObjectKind.BRACE,
    ">": TextObjectKind.ANGLE,
}

PAIRS = {
    TextObjectKind.PAREN: ("(", ")"),
    TextObjectKind.BRACKET: ("[", "]"),
    TextObjectKind.BRACE: ("{", "}"),
    TextObjectKind.ANGLE: ("<", ">"),
}

QUOTES = frozenset(
    {TextObjectKind.DOUBLE_QUOTE, TextObjectKind.SINGLE_QUOTE, TextObjectKind.BACKTICK}
)

OBJECT_KEYS = tuple(kind.value for kind in TextObjectKind) + tuple(ALIASES)


def text_object_kind(key: str) -> Optional[TextObjectKind]:
    if key in ALIASES:
        return ALIASES[key]
    try:
        return TextObjectKind(key)
    except ValueError:
        return None


# ============================================================================
# Word text objects: iw, aw, iW, aW
# ============================================================================


def _run_end(text: str, pos: int, limit: int, big: bool) -> int:
    run_class = char_class(text[pos], big=big)
    while pos < limit and char_class(text[pos], big=big) == run_class:
        pos += 1
    return pos


def _skip_blanks(text: str, pos: int, limit: int) -> int:
    while pos < limit and text[pos] in " \t":
        pos += 1
    return pos


def text_object_word(
    document: BufferDocument, offset: int, *, around: bool, big: bool = False, count: int = 1
) -> Optional[Span]:
    """Select the run of same-class characters under the cursor (iw/aw).

    ``aw`` on a word takes the trailing blanks, or the leading ones when the
    word ends the line; ``aw`` on blanks takes the blanks plus the next word.
    """

    text = document.text
    line_start = document.line_start(offset)
    line_end = document.line_end(offset)
    if line_start == line_end or offset >= line_end:
        return None

    run_class = char_class(text[offset], big=big)
    start = offset
    while start > line_start and char_class(text[start - 1], big=big) == run_class:
        start -= 1
    end = _run_end(text, offset, line_end, big)

    if not around:
        for _ in range(count - 1):
            if end >= line_end:
                break
            end = _run_end(text, end, line_end, big)
        return Span(start, end)

    if run_class == BLANK:
        if end < line_end:
            end = _run_end(text, end, line_end, big)
        for _ in range(count - 1):
            end = _skip_blanks(text, end, line_end)
            if end < line_end:
                end = _run_end(text, end, line_end, big)
        return Span(start, end)

    trailing = _skip_blanks(text, end, line_end)
    if trailing > end:
        end = trailing
    else:
        while start > line_start and text[start - 1] in " \t":
            start -= 1
    for _ in range(count - 1):
        if end >= line_end:
            break
        end = _skip_blanks(text, _run_end(text, end, line_end, big), line_end)
    return Span(start, end)


# ============================================================================
# Quote text objects: i", a", i', a', i`, a`
# ============================================================================


def _quote_positions(text: str, start: int, end: int, quote: str) -> list[int]:
    positions: list[int] = []
    pos = start
    while pos < end:
        ch = text[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == quote:
            positions.append(pos)
        pos += 1
    return positions


def text_object_quote(
    document: BufferDocument, offset: int, quote: str, *, around: bool
) -> Optional[Span]:
    """Select the quoted string straddling the cursor on its line.

    Quotes pair up left to right; escaped quotes are skipped.
    """

    text = document.text
    line_start = document.line_start(offset)
    line_end = document.line_end(offset)
    positions = _quote_positions(text, line_start, line_end, quote)
    for index in range(0, len(positions) - 1, 2):
        open_pos, close_pos = positions[index], positions[index + 1]
        if open_pos <= offset <= close_pos:
            if around:
                return Span(open_pos, close_pos + 1)
            return Span(open_pos + 1, close_pos)
    return None


# ============================================================================
# Bracket text objects: i( a( i[ a[ i{ a{ i< a<
# ============================================================================


def _scan_open(text: str, before: int, open_ch: str, close_ch: str) -> Optional[int]:
    """Nearest unbalanced ``open_ch`` strictly before ``before``."""

    depth = 0
    pos = before - 1
    while pos >= 0:
        ch = text[pos]
        if ch == close_ch:
            depth += 1
        elif ch == open_ch:
            if depth == 0:
                return pos
            depth -= 1
        pos -= 1
    return None


def _find_close(text: str, open_pos: int, open_ch: str, close_ch: str) -> Optional[int]:
    depth = 0
    pos = open_pos + 1
    while pos < len(text):
        ch = text[pos]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            if depth == 0:
                return pos
            depth -= 1
        pos += 1
    return None


def text_object_bracket(
    document: BufferDocument,
    offset: int,
    kind: TextObjectKind,
    *,
    around: bool,
    count: int = 1,
) -> Optional[Span]:
    """Select the ``count``-th enclosing bracket pair (depth-balanced scan).

    A cursor on either bracket of a pair selects that pair.
    """

    open_ch, close_ch = PAIRS[kind]
    text = document.text
    if offset < len(text) and text[offset] == open_ch:
        open_pos: Optional[int] = offset
    else:
        open_pos = _scan_open(text, offset, open_ch, close_ch)
    for _ in range(count - 1):
        if open_pos is None:
            break
        open_pos = _scan_open(text, open_pos, open_ch, close_ch)
    if open_pos is None:
        return None
    close_pos = _find_close(text, open_pos, open_ch, close_ch)
    if close_pos is None:
        return None
    if around:
        return Span(open_pos, close_pos + 1)
    return Span(open_pos + 1, close_pos)


def resolve_text_object(
    document: BufferDocument,
    offset: int,
    key: str,
    *,
    around: bool,
    count: int = 1,
) -> Optional[Span]:
    """Resolve ``i{key}``/``a{key}`` at ``offset``; ``None`` when nothing matches."""

    kind = text_object_kind(key)
    if kind is None:
        return None
    if kind in (TextObjectKind.WORD, TextObjectKind.BIG_WORD):
        return text_object_word(
            document, offset, around=around, big=kind is TextObjectKind.BIG_WORD, count=count
        )
    if kind in QUOTES:
        return text_object_quote(document, offset, kind.value, around=around)
    return text_object_bracket(document, offset, kind, around=around, count=count)


__all__ = [
    "TextObjectKind",
    "OBJECT_KEYS",
    "resolve_text_object",
    "text_object_kind",
    "text_object_word",
    "text_object_quote",
    "text_object_bracket",
]
