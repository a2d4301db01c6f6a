"""Core document data structure for modal_engine buffers."""

from __future__ import annotations

from dataclasses import dataclass


def clamp_offset(offset: int, length: int) -> int:
    """Clamp ``offset`` into ``[0, length]``."""

    if offset < 0:
        return 0
    if offset > length:
        return length
    return offset


@dataclass(frozen=True, slots=True)
class BufferDocument:
    """Immutable flat-text storage addressed by code-unit offsets.

    Lines are separated by ``"\\n"``; a trailing newline therefore yields an
    empty final line. Every edit returns a new document with a bumped
    version, so snapshots can be shared freely between undo entries and
    rendering collaborators.
    """

    text: str = ""
    version: int = 0
    dirty: bool = False

    @classmethod
    def from_text(cls, text: str) -> "BufferDocument":
        return cls(text=text, version=0, dirty=False)

    def __len__(self) -> int:
        return len(self.text)

    def replace(self, start: int, end: int, text: str) -> "BufferDocument":
        """Return a document with ``[start:end]`` replaced by ``text``."""

        length = len(self.text)
        start = clamp_offset(start, length)
        end = clamp_offset(end, length)
        if start > end:
            start, end = end, start
        updated = self.text[:start] + text + self.text[end:]
        return BufferDocument(text=updated, version=self.version + 1, dirty=True)

    def with_text(self, text: str, *, dirty: bool = True) -> "BufferDocument":
        return BufferDocument(text=text, version=self.version + 1, dirty=dirty)

    def slice(self, start: int, end: int) -> str:
        length = len(self.text)
        start = clamp_offset(start, length)
        end = clamp_offset(end, length)
        if start > end:
            start, end = end, start
        return self.text[start:end]

    def char_at(self, offset: int) -> str:
        if 0 <= offset < len(self.text):
            return self.text[offset]
        return ""

    # line geometry -------------------------------------------------------

    def line_start(self, offset: int) -> int:
        offset = clamp_offset(offset, len(self.text))
        return self.text.rfind("\n", 0, offset) + 1

    def line_end(self, offset: int) -> int:
        """Offset of the newline ending ``offset``'s line (or text length)."""

        offset = clamp_offset(offset, len(self.text))
        index = self.text.find("\n", offset)
        return len(self.text) if index == -1 else index

    def line_index(self, offset: int) -> int:
        offset = clamp_offset(offset, len(self.text))
        return self.text.count("\n", 0, offset)

    @property
    def line_count(self) -> int:
        return self.text.count("\n") + 1

    def line_offset(self, index: int) -> int:
        """Offset of the first character of line ``index`` (clamped)."""

        if index <= 0:
            return 0
        offset = 0
        for _ in range(index):
            found = self.text.find("\n", offset)
            if found == -1:
                return self.line_start(len(self.text))
            offset = found + 1
        return offset

    def column(self, offset: int) -> int:
        offset = clamp_offset(offset, len(self.text))
        return offset - self.line_start(offset)

    def first_non_blank(self, offset: int) -> int:
        """Offset of the first non-blank character on ``offset``'s line."""

        position = self.line_start(offset)
        end = self.line_end(offset)
        while position < end and self.text[position] in " \t":
            position += 1
        return position

    def last_char(self, offset: int) -> int:
        """Offset of the last character on the line, or its start when empty."""

        start = self.line_start(offset)
        end = self.line_end(offset)
        return end - 1 if end > start else start


__all__ = ["BufferDocument", "clamp_offset"]
