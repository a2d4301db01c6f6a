"""Cursor motions over a flat-text document.

Every motion is a plain function ``(document, offset, request) ->
MotionResult``. The result carries the destination plus the
inclusive/exclusive and charwise/linewise classification operators need.
A motion that cannot move (``h`` at column zero, ``fx`` with no ``x`` on the
line) returns ``failed=True`` and leaves the offset untouched.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, Optional

from modal_engine.buffer.document import BufferDocument, clamp_offset

from .chars import BLANK, char_class
from .types import FindSpec, MotionResult, SearchSpec

LINE_END_COLUMN = sys.maxsize

BRACKETS = {"(": ")", "[": "]", "{": "}", "<": ">"}
CLOSERS = {close: open_ for open_, close in BRACKETS.items()}


class Motion(str, Enum):
    LEFT = "h"
    RIGHT = "l"
    UP = "k"
    DOWN = "j"
    WORD_FORWARD = "w"
    WORD_BACKWARD = "b"
    WORD_END = "e"
    WORD_END_BACKWARD = "ge"
    BIG_WORD_FORWARD = "W"
    BIG_WORD_BACKWARD = "B"
    BIG_WORD_END = "E"
    BIG_WORD_END_BACKWARD = "gE"
    LINE_START = "0"
    FIRST_NON_BLANK = "^"
    LINE_END = "$"
    DOCUMENT_START = "gg"
    DOCUMENT_END = "G"
    PARAGRAPH_FORWARD = "}"
    PARAGRAPH_BACKWARD = "{"
    MATCHING_BRACKET = "%"
    FIND_CHAR = "f"
    FIND_CHAR_BACKWARD = "F"
    TILL_CHAR = "t"
    TILL_CHAR_BACKWARD = "T"
    REPEAT_FIND = ";"
    REPEAT_FIND_REVERSE = ","
    SEARCH_NEXT = "n"
    SEARCH_PREVIOUS = "N"


CHAR_MOTIONS = frozenset(
    {Motion.FIND_CHAR, Motion.FIND_CHAR_BACKWARD, Motion.TILL_CHAR, Motion.TILL_CHAR_BACKWARD}
)
VERTICAL_MOTIONS = frozenset({Motion.UP, Motion.DOWN})


@dataclass(frozen=True, slots=True)
class MotionRequest:
    count: int = 1
    has_count: bool = False
    char: Optional[str] = None
    desired_column: Optional[int] = None
    last_find: Optional[FindSpec] = None
    search: Optional[SearchSpec] = None


MotionFunc = Callable[[BufferDocument, int, MotionRequest], MotionResult]


def clamp_to_char(document: BufferDocument, offset: int) -> int:
    """Pull ``offset`` back onto a character, the Normal-mode cursor rule."""

    offset = clamp_offset(offset, len(document))
    start = document.line_start(offset)
    end = document.line_end(offset)
    if offset >= end and end > start:
        return end - 1
    return offset


def _fail(offset: int) -> MotionResult:
    return MotionResult(offset=offset, failed=True)


def _moved(origin: int, target: int, **kwargs: object) -> MotionResult:
    if target == origin:
        return _fail(origin)
    return MotionResult(offset=target, **kwargs)  # type: ignore[arg-type]


def _is_empty_line(text: str, pos: int) -> bool:
    if pos < len(text) and text[pos] != "\n":
        return False
    return pos == 0 or text[pos - 1] == "\n"


# --------------------------------------------------------------- characters


def motion_left(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
    target = max(document.line_start(offset), offset - request.count)
    return _moved(offset, target)


def motion_right(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
    target = min(document.line_end(offset), offset + request.count)
    return _moved(offset, target)


def _vertical(
    document: BufferDocument, offset: int, request: MotionRequest, direction: int
) -> MotionResult:
    column = request.desired_column
    if column is None:
        column = document.column(offset)
    current = document.line_index(offset)
    target_line = min(max(current + direction * request.count, 0), document.line_count - 1)
    if target_line == current:
        return _fail(offset)
    start = document.line_offset(target_line)
    length = document.line_end(start) - start
    target = start + min(column, max(length - 1, 0))
    return MotionResult(offset=target, linewise=True, desired_column=column)


def motion_up(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
    return _vertical(document, offset, request, -1)


def motion_down(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
    return _vertical(document, offset, request, 1)


# -------------------------------------------------------------------- words


def _next_word_start(text: str, pos: int, big: bool) -> int:
    n = len(text)
    if pos >= n:
        return pos
    start_class = char_class(text[pos], big=big)
    if start_class != BLANK:
        while pos < n and char_class(text[pos], big=big) == start_class:
            pos += 1
    while pos < n and text[pos].isspace():
        pos += 1
        # an empty line counts as a word of its own
        if text[pos - 1] == "\n" and _is_empty_line(text, pos):
            return pos
    return pos


def _prev_word_start(text: str, pos: int, big: bool) -> int:
    if pos <= 0:
        return 0
    pos -= 1
    while pos > 0 and text[pos].isspace():
        if _is_empty_line(text, pos):
            return pos
        pos -= 1
    word_class = char_class(text[pos], big=big)
    while pos > 0 and char_class(text[pos - 1], big=big) == word_class:
        pos -= 1
    return pos


def _next_word_end(text: str, pos: int, big: bool) -> int:
    n = len(text)
    if pos >= n - 1:
        return pos
    pos += 1
    while pos < n and text[pos].isspace():
        pos += 1
    if pos >= n:
        return n - 1
    word_class = char_class(text[pos], big=big)
    while pos + 1 < n and char_class(text[pos + 1], big=big) == word_class:
        pos += 1
    return pos


def _prev_word_end(text: str, pos: int, big: bool) -> int:
    if pos <= 0:
        return 0
    current = text[pos] if pos < len(text) else "\n"
    word_class = char_class(current, big=big)
    if word_class == BLANK:
        pos -= 1
    else:
        while pos > 0 and char_class(text[pos], big=big) == word_class:
            pos -= 1
        if char_class(text[pos], big=big) == word_class:
            return 0
    while pos > 0 and text[pos].isspace():
        if _is_empty_line(text, pos):
            return pos
        pos -= 1
    return pos


def _word_motion(
    step: Callable[[str, int, bool], int], *, big: bool, inclusive: bool = False
) -> MotionFunc:
    def motion(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
        text = document.text
        position = offset
        for _ in range(request.count):
            advanced = step(text, position, big)
            if advanced == position:
                break
            position = advanced
        return _moved(offset, position, inclusive=inclusive)

    return motion


motion_word_forward = _word_motion(_next_word_start, big=False)
motion_word_backward = _word_motion(_prev_word_start, big=False)
motion_word_end = _word_motion(_next_word_end, big=False, inclusive=True)
motion_word_end_backward = _word_motion(_prev_word_end, big=False, inclusive=True)
motion_big_word_forward = _word_motion(_next_word_start, big=True)
motion_big_word_backward = _word_motion(_prev_word_start, big=True)
motion_big_word_end = _word_motion(_next_word_end, big=True, inclusive=True)
motion_big_word_end_backward = _word_motion(_prev_word_end, big=True, inclusive=True)


# -------------------------------------------------------------------- lines


def motion_line_start(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    return MotionResult(offset=document.line_start(offset))


def motion_first_non_blank(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    return MotionResult(offset=document.first_non_blank(offset))


def motion_line_end(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
    line = min(document.line_index(offset) + request.count - 1, document.line_count - 1)
    target = document.last_char(document.line_offset(line))
    return MotionResult(offset=target, inclusive=True, desired_column=LINE_END_COLUMN)


def _goto_line(document: BufferDocument, line: int) -> MotionResult:
    line = min(max(line, 0), document.line_count - 1)
    target = document.first_non_blank(document.line_offset(line))
    return MotionResult(offset=target, linewise=True, jump=True)


def motion_document_start(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    return _goto_line(document, request.count - 1 if request.has_count else 0)


def motion_document_end(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    line = request.count - 1 if request.has_count else document.line_count - 1
    return _goto_line(document, line)


def goto_line(document: BufferDocument, number: int) -> MotionResult:
    """Jump to 1-based line ``number`` (clamped)."""

    return _goto_line(document, number - 1)


# --------------------------------------------------------------- paragraphs


def motion_paragraph_forward(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    lines = document.text.split("\n")
    last = len(lines) - 1
    index = document.line_index(offset)
    for _ in range(request.count):
        if index >= last:
            break
        while index < last and not lines[index].strip():
            index += 1
        while index < last and lines[index].strip():
            index += 1
    if lines[index].strip():
        target = len(document)
    else:
        target = document.line_offset(index)
    return _moved(offset, target, jump=True)


def motion_paragraph_backward(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    lines = document.text.split("\n")
    index = document.line_index(offset)
    for _ in range(request.count):
        if index <= 0:
            break
        while index > 0 and not lines[index].strip():
            index -= 1
        while index > 0 and lines[index].strip():
            index -= 1
    return _moved(offset, document.line_offset(index), jump=True)


# ----------------------------------------------------------------- brackets


def find_matching_bracket(text: str, pos: int) -> Optional[int]:
    """Depth-counted scan from the bracket at ``pos`` to its partner."""

    ch = text[pos]
    if ch in BRACKETS:
        own, other, step = ch, BRACKETS[ch], 1
    elif ch in CLOSERS:
        own, other, step = ch, CLOSERS[ch], -1
    else:
        return None
    depth = 0
    while 0 <= pos < len(text):
        current = text[pos]
        if current == own:
            depth += 1
        elif current == other:
            depth -= 1
            if depth == 0:
                return pos
        pos += step
    return None


def motion_matching_bracket(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    if request.has_count:
        # N% jumps to N percent of the document
        line = (request.count * document.line_count + 99) // 100 - 1
        return _goto_line(document, line)
    text = document.text
    end = document.line_end(offset)
    pos = offset
    while pos < end and text[pos] not in BRACKETS and text[pos] not in CLOSERS:
        pos += 1
    if pos >= end:
        return _fail(offset)
    partner = find_matching_bracket(text, pos)
    if partner is None:
        return _fail(offset)
    return MotionResult(offset=partner, inclusive=True, jump=True)


# ---------------------------------------------------------- in-line search


def find_in_line(
    document: BufferDocument,
    offset: int,
    spec: FindSpec,
    count: int = 1,
    *,
    repeat: bool = False,
) -> Optional[int]:
    """Locate the ``count``-th ``spec.char`` on the cursor line.

    ``repeat`` makes a till search skip a match directly adjacent to the
    cursor so that ``;`` after ``tx`` moves on instead of sticking.
    """

    text = document.text
    if len(spec.char) != 1:
        return None
    position = offset
    skip_adjacent = spec.till and repeat
    if spec.forward:
        limit = document.line_end(offset)
        for iteration in range(count):
            start = position + 1
            if skip_adjacent and iteration == 0 and start < limit and text[start] == spec.char:
                start += 1
            found = text.find(spec.char, start, limit)
            if found == -1:
                return None
            position = found
        return position - 1 if spec.till else position

    limit = document.line_start(offset)
    for iteration in range(count):
        stop = position
        if skip_adjacent and iteration == 0 and limit < stop and text[stop - 1] == spec.char:
            stop -= 1
        found = text.rfind(spec.char, limit, stop)
        if found == -1:
            return None
        position = found
    return position + 1 if spec.till else position


def _find_result(
    document: BufferDocument,
    offset: int,
    spec: FindSpec,
    count: int,
    *,
    repeat: bool,
) -> MotionResult:
    target = find_in_line(document, offset, spec, count, repeat=repeat)
    if target is None:
        return _fail(offset)
    return MotionResult(
        offset=target,
        inclusive=spec.forward,
        find=None if repeat else spec,
    )


def _find_motion(kind: str) -> MotionFunc:
    def motion(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
        if not request.char:
            return _fail(offset)
        spec = FindSpec(kind=kind, char=request.char)
        return _find_result(document, offset, spec, request.count, repeat=False)

    return motion


def motion_repeat_find(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    if request.last_find is None:
        return _fail(offset)
    return _find_result(document, offset, request.last_find, request.count, repeat=True)


def motion_repeat_find_reverse(
    document: BufferDocument, offset: int, request: MotionRequest
) -> MotionResult:
    if request.last_find is None:
        return _fail(offset)
    spec = request.last_find.reversed()
    return _find_result(document, offset, spec, request.count, repeat=True)


# ------------------------------------------------------------ pattern search


def find_pattern(text: str, term: str, offset: int, *, backward: bool = False) -> Optional[int]:
    """Plain substring search from ``offset`` that wraps around the buffer."""

    if not term:
        return None
    if backward:
        found = text.rfind(term, 0, max(offset, 0))
        if found == -1:
            found = text.rfind(term)
    else:
        found = text.find(term, offset + 1)
        if found == -1:
            found = text.find(term)
    return None if found == -1 else found


def _search_motion(reverse: bool) -> MotionFunc:
    def motion(document: BufferDocument, offset: int, request: MotionRequest) -> MotionResult:
        spec = request.search
        if spec is None or not spec.term:
            return _fail(offset)
        backward = spec.backward != reverse
        position = offset
        for _ in range(request.count):
            found = find_pattern(document.text, spec.term, position, backward=backward)
            if found is None:
                return _fail(offset)
            position = found
        return MotionResult(offset=position, jump=True)

    return motion


MOTIONS: Dict[Motion, MotionFunc] = {
    Motion.LEFT: motion_left,
    Motion.RIGHT: motion_right,
    Motion.UP: motion_up,
    Motion.DOWN: motion_down,
    Motion.WORD_FORWARD: motion_word_forward,
    Motion.WORD_BACKWARD: motion_word_backward,
    Motion.WORD_END: motion_word_end,
    Motion.WORD_END_BACKWARD: motion_word_end_backward,
    Motion.BIG_WORD_FORWARD: motion_big_word_forward,
    Motion.BIG_WORD_BACKWARD: motion_big_word_backward,
    Motion.BIG_WORD_END: motion_big_word_end,
    Motion.BIG_WORD_END_BACKWARD: motion_big_word_end_backward,
    Motion.LINE_START: motion_line_start,
    Motion.FIRST_NON_BLANK: motion_first_non_blank,
    Motion.LINE_END: motion_line_end,
    Motion.DOCUMENT_START: motion_document_start,
    Motion.DOCUMENT_END: motion_document_end,
    Motion.PARAGRAPH_FORWARD: motion_paragraph_forward,
    Motion.PARAGRAPH_BACKWARD: motion_paragraph_backward,
    Motion.MATCHING_BRACKET: motion_matching_bracket,
    Motion.FIND_CHAR: _find_motion("f"),
    Motion.FIND_CHAR_BACKWARD: _find_motion("F"),
    Motion.TILL_CHAR: _find_motion("t"),
    Motion.TILL_CHAR_BACKWARD: _find_motion("T"),
    Motion.REPEAT_FIND: motion_repeat_find,
    Motion.REPEAT_FIND_REVERSE: motion_repeat_find_reverse,
    Motion.SEARCH_NEXT: _search_motion(reverse=False),
    Motion.SEARCH_PREVIOUS: _search_motion(reverse=True),
}


def apply_motion(
    document: BufferDocument,
    offset: int,
    motion: Motion | str,
    request: Optional[MotionRequest] = None,
    **overrides: object,
) -> MotionResult:
    """Run ``motion`` from ``offset``; ``overrides`` patch the request."""

    request = request or MotionRequest()
    if overrides:
        request = replace(request, **overrides)  # type: ignore[arg-type]
    if request.count < 1:
        request = replace(request, count=1)
    offset = clamp_offset(offset, len(document))
    return MOTIONS[Motion(motion)](document, offset, request)


__all__ = [
    "Motion",
    "MotionRequest",
    "MotionResult",
    "MOTIONS",
    "CHAR_MOTIONS",
    "VERTICAL_MOTIONS",
    "LINE_END_COLUMN",
    "apply_motion",
    "clamp_to_char",
    "find_in_line",
    "find_matching_bracket",
    "find_pattern",
    "goto_line",
]
