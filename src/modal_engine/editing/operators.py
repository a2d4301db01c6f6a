"""Operator engine: turns motion results and text objects into edits."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from modal_engine.buffer import Buffer, RegisterBank
from modal_engine.buffer.document import BufferDocument
from modal_engine.runtime import telemetry

from .motions import Motion, clamp_to_char
from .types import MotionResult, Span


class Operator(str, Enum):
    DELETE = "d"
    YANK = "y"
    CHANGE = "c"
    INDENT_RIGHT = ">"
    INDENT_LEFT = "<"

    @property
    def mutates(self) -> bool:
        return self is not Operator.YANK


WORD_FORWARD_MOTIONS = frozenset({Motion.WORD_FORWARD, Motion.BIG_WORD_FORWARD})


@dataclass(frozen=True, slots=True)
class OperatorOutcome:
    applied: bool
    status: str
    text: str = ""
    enter_insert: bool = False
    span: Optional[Span] = None


def line_span(document: BufferDocument, offset: int, count: int = 1) -> Span:
    """Linewise span over ``count`` lines starting at ``offset``'s line."""

    first = document.line_index(offset)
    last = min(first + max(count, 1) - 1, document.line_count - 1)
    start = document.line_offset(first)
    end = document.line_end(document.line_offset(last))
    return Span(start, end, linewise=True)


def motion_span(
    document: BufferDocument,
    start: int,
    result: MotionResult,
    motion: Motion,
) -> Span:
    """Span an operator covers for a motion from ``start`` to ``result``.

    Inclusive motions take the destination character (never a newline).
    Linewise motions snap to whole lines. Exclusive motions that end in
    column zero of a later line stop at the previous line's end, and become
    linewise when they started at or before the first non-blank.
    """

    end = result.offset
    if result.linewise:
        low, high = sorted((start, end))
        first = document.line_start(low)
        return Span(first, document.line_end(high), linewise=True)

    low, high = sorted((start, end))
    if result.inclusive:
        if document.char_at(high) not in ("", "\n"):
            high += 1
        return Span(low, high)

    if motion in WORD_FORWARD_MOTIONS and end > start:
        # dw on the last word of a line stops at that line's end
        if document.line_index(end) > document.line_index(start):
            line_end = document.line_end(document.line_start(end) - 1)
            return Span(start, max(start, line_end))
        return Span(start, end)

    if (
        high > low
        and high == document.line_start(high)
        and document.line_index(high) > document.line_index(low)
    ):
        previous_end = high - 1
        if low <= document.first_non_blank(low):
            return Span(document.line_start(low), document.line_end(previous_end), linewise=True)
        return Span(low, previous_end)
    return Span(low, high)


class OperatorEngine:
    """Applies delete/yank/change/indent to spans and writes registers.

    Every mutating call snapshots the buffer exactly once through a buffer
    transaction, so each operator undoes as a single step.
    """

    def __init__(
        self,
        buffer: Buffer,
        registers: RegisterBank,
        *,
        indent_width: int = 2,
        logger_name: Optional[str] = None,
    ) -> None:
        self.buffer = buffer
        self.registers = registers
        self.indent_unit = " " * indent_width
        self.logger_name = logger_name

    @property
    def document(self) -> BufferDocument:
        return self.buffer.document

    def apply(
        self,
        operator: Operator,
        span: Span,
        *,
        register: str = '"',
        amount: int = 1,
    ) -> OperatorOutcome:
        with telemetry.span(
            f"operator::{operator.name.lower()}",
            logger_name=self.logger_name,
            component="operators",
            metadata={"start": span.start, "end": span.end, "linewise": span.linewise},
        ):
            if operator is Operator.YANK:
                return self.yank(span, register=register)
            if operator is Operator.DELETE:
                return self.delete(span, register=register)
            if operator is Operator.CHANGE:
                return self.change(span, register=register)
            return self.indent(
                span, amount=amount, right=operator is Operator.INDENT_RIGHT
            )

    def register_text(self, span: Span) -> str:
        text = self.document.slice(span.start, span.end)
        return text + "\n" if span.linewise else text

    # ----------------------------------------------------------------- yank

    def yank(self, span: Span, *, register: str = '"') -> OperatorOutcome:
        if span.empty:
            return OperatorOutcome(applied=False, status="empty_span", span=span)
        text = self.register_text(span)
        self.registers.write(register, text, is_yank=True)
        cursor = self.buffer.cursor
        if span.linewise:
            if span.start < self.document.line_start(cursor):
                self.buffer.set_cursor(self.document.first_non_blank(span.start))
        elif span.start < cursor:
            self.buffer.set_cursor(span.start)
        return OperatorOutcome(applied=True, status="yanked", text=text, span=span)

    # --------------------------------------------------------------- delete

    def delete(self, span: Span, *, register: str = '"') -> OperatorOutcome:
        if span.empty:
            return OperatorOutcome(applied=False, status="empty_span", span=span)
        text = self.register_text(span)
        self.registers.write(register, text, is_yank=False)
        with self.buffer.transaction("delete"):
            if span.linewise:
                self._delete_lines(span)
            else:
                self.buffer.delete_range(span.start, span.end, label="delete")
                self.buffer.set_cursor(clamp_to_char(self.document, span.start))
        return OperatorOutcome(applied=True, status="deleted", text=text, span=span)

    def _delete_lines(self, span: Span) -> None:
        length = len(self.document)
        if span.end < length:
            start, end = span.start, span.end + 1
        elif span.start > 0:
            start, end = span.start - 1, span.end
        else:
            start, end = span.start, span.end
        self.buffer.delete_range(start, end, label="delete_lines")
        landing = min(start, len(self.document))
        self.buffer.set_cursor(self.document.first_non_blank(landing))

    # --------------------------------------------------------------- change

    def change(self, span: Span, *, register: str = '"') -> OperatorOutcome:
        """Delete ``span`` and leave the cursor where Insert should begin.

        The caller is expected to have opened the insert undo group so the
        deletion and the typed replacement undo together.
        """

        text = self.register_text(span) if not span.empty else ""
        if text:
            self.registers.write(register, text, is_yank=False)
        if span.linewise:
            # the lines collapse into one empty line
            self.buffer.replace_range(
                span.start, span.end, "", label="change_lines", cursor=span.start
            )
        elif not span.empty:
            self.buffer.delete_range(span.start, span.end, label="change")
        else:
            self.buffer.set_cursor(span.start)
        return OperatorOutcome(
            applied=True, status="changed", text=text, enter_insert=True, span=span
        )

    # --------------------------------------------------------------- indent

    def indent(self, span: Span, *, amount: int = 1, right: bool = True) -> OperatorOutcome:
        document = self.document
        first = document.line_start(span.start)
        last_end = document.line_end(span.end if span.end > span.start else span.start)
        block = document.slice(first, last_end)
        lines = block.split("\n")
        width = len(self.indent_unit) * max(amount, 1)
        if right:
            prefix = self.indent_unit * max(amount, 1)
            shifted = [prefix + line if line else line for line in lines]
        else:
            shifted = [_dedent(line, width) for line in lines]
        updated = "\n".join(shifted)
        if updated == block:
            return OperatorOutcome(applied=False, status="unchanged", span=span)
        with self.buffer.transaction("indent"):
            self.buffer.replace_range(first, last_end, updated, label="indent")
            self.buffer.set_cursor(self.document.first_non_blank(first))
        return OperatorOutcome(applied=True, status="indented", span=span)

    # ------------------------------------------------------------------ put

    def put(self, register: str = '"', *, before: bool = False, count: int = 1) -> OperatorOutcome:
        """Paste register content after (or before) the cursor ``count`` times."""

        value = self.registers.read(register)
        text = value.text.replace("\r\n", "\n")
        if not text:
            return OperatorOutcome(applied=False, status="register_empty")
        count = max(count, 1)
        document = self.document
        cursor = self.buffer.cursor
        with self.buffer.transaction("put"):
            if text.endswith("\n"):
                payload = text * count
                if before:
                    at = document.line_start(cursor)
                    self.buffer.insert_text(payload, at=at, label="put_lines")
                    self.buffer.set_cursor(self.document.first_non_blank(at))
                else:
                    line_end = document.line_end(cursor)
                    if line_end < len(document):
                        at = line_end + 1
                        self.buffer.insert_text(payload, at=at, label="put_lines")
                    else:
                        at = line_end + 1
                        self.buffer.insert_text(
                            "\n" + payload[:-1], at=line_end, label="put_lines"
                        )
                    self.buffer.set_cursor(self.document.first_non_blank(at))
            else:
                payload = text * count
                if before:
                    at = cursor
                else:
                    at = min(cursor + 1, document.line_end(cursor))
                self.buffer.insert_text(payload, at=at, label="put")
                self.buffer.set_cursor(at + len(payload) - 1)
        return OperatorOutcome(applied=True, status="put", text=text)


def _dedent(line: str, width: int) -> str:
    removed = 0
    while removed < width and removed < len(line) and line[removed] == " ":
        removed += 1
    if removed == 0 and line.startswith("\t"):
        removed = 1
    return line[removed:]


__all__ = [
    "Operator",
    "OperatorEngine",
    "OperatorOutcome",
    "line_span",
    "motion_span",
]
