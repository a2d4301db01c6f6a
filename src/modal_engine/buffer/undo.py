"""Bounded undo/redo history of whole-buffer snapshots."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional


@dataclass(frozen=True, slots=True)
class UndoEntry:
    text: str
    cursor: int
    label: str = ""


class UndoHistory:
    """Linear undo/redo stacks, each capped at ``limit`` entries.

    ``push`` is called *before* a mutation with the pre-mutation state and
    clears the redo stack. ``undo``/``redo`` take the live state so it can be
    parked on the opposite stack, and return the entry to restore.
    """

    def __init__(self, limit: int = 100) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        self.limit = limit
        self._undo: Deque[UndoEntry] = deque(maxlen=limit)
        self._redo: Deque[UndoEntry] = deque(maxlen=limit)

    def __len__(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def push(self, entry: UndoEntry) -> None:
        self._undo.append(entry)
        self._redo.clear()

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self, current: UndoEntry) -> Optional[UndoEntry]:
        if not self._undo:
            return None
        entry = self._undo.pop()
        self._redo.append(current)
        return entry

    def redo(self, current: UndoEntry) -> Optional[UndoEntry]:
        if not self._redo:
            return None
        entry = self._redo.pop()
        self._undo.append(current)
        return entry


__all__ = ["UndoEntry", "UndoHistory"]
