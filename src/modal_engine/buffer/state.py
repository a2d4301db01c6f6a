"""Cursor, selection, and change tracking state for buffers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .document import clamp_offset

Selection = Tuple[int, int]  # (selection_start, selection_end)


@dataclass(slots=True)
class BufferState:
    """Mutable cursor + selection offsets tied to a BufferDocument.

    ``selection_start <= selection_end`` always holds; the two are equal
    when nothing is selected. ``desired_column`` remembers the column
    vertical motions aim for across lines of unequal length.
    """

    cursor: int = 0
    selection_start: int = 0
    selection_end: int = 0
    desired_column: Optional[int] = None

    @property
    def selection(self) -> Optional[Selection]:
        if self.selection_start == self.selection_end:
            return None
        return (self.selection_start, self.selection_end)

    def set_cursor(self, offset: int, length: int) -> None:
        self.cursor = clamp_offset(offset, length)
        self.selection_start = self.selection_end = self.cursor

    def set_selection(self, start: int, end: int, length: int) -> None:
        start = clamp_offset(start, length)
        end = clamp_offset(end, length)
        if start > end:
            start, end = end, start
        self.selection_start = start
        self.selection_end = end

    def clear_selection(self) -> None:
        self.selection_start = self.selection_end = self.cursor

    def clamp(self, length: int) -> None:
        self.cursor = clamp_offset(self.cursor, length)
        self.set_selection(self.selection_start, self.selection_end, length)


__all__ = ["BufferState", "Selection"]
