"""Snapshot type exchanged between the engine and host widgets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True, slots=True)
class BufferMirror:
    """Host-friendly snapshot describing the current buffer state."""

    text: str
    cursor: int
    selection_start: int
    selection_end: int
    attributes: dict[str, str] = field(default_factory=dict)

    @property
    def selection(self) -> Optional[Tuple[int, int]]:
        if self.selection_start == self.selection_end:
            return None
        return (self.selection_start, self.selection_end)


__all__ = ["BufferMirror"]
