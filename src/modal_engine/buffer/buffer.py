"""High-level buffer façade combining document, state, and undo history."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import ContextManager, Optional

from modal_engine.runtime import telemetry

from .document import BufferDocument, clamp_offset
from .state import BufferState, Selection
from .sync import BufferMirror
from .undo import UndoEntry, UndoHistory


@dataclass(frozen=True, slots=True)
class BufferView:
    version: int
    text: str
    cursor: int
    selection: Optional[Selection]


@dataclass(slots=True)
class _UndoGroup:
    label: str
    snapshotted: bool = False


class Buffer:
    """Text plus cursor/selection with snapshot-before-mutate undo.

    Every mutation goes through ``replace_range`` (or ``set_text``), which
    pushes the pre-mutation ``(text, cursor)`` onto the undo history. While
    an undo group is open only its first mutation is snapshotted, so an
    insert session or an operator that edits several ranges undoes in one
    step.
    """

    def __init__(
        self,
        *,
        name: str = "default",
        document: Optional[BufferDocument] = None,
        state: Optional[BufferState] = None,
        undo: Optional[UndoHistory] = None,
        logger_name: Optional[str] = None,
    ) -> None:
        self.name = name
        self.document = document if document is not None else BufferDocument()
        self.state = state if state is not None else BufferState()
        self.undo_history = undo if undo is not None else UndoHistory()
        self.logger_name = logger_name
        self._group: Optional[_UndoGroup] = None
        self.state.clamp(len(self.document))

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        name: str = "default",
        cursor: int = 0,
        undo_limit: int = 100,
    ) -> "Buffer":
        buffer = cls(
            name=name,
            document=BufferDocument.from_text(text),
            undo=UndoHistory(undo_limit),
        )
        buffer.set_cursor(cursor)
        return buffer

    # ------------------------------------------------------------------ reads

    @property
    def text(self) -> str:
        return self.document.text

    def __len__(self) -> int:
        return len(self.document)

    @property
    def cursor(self) -> int:
        return self.state.cursor

    def set_cursor(self, offset: int, *, keep_column: bool = False) -> int:
        self.state.set_cursor(offset, len(self.document))
        if not keep_column:
            self.state.desired_column = None
        return self.state.cursor

    def set_selection(self, start: int, end: int) -> None:
        self.state.set_selection(start, end, len(self.document))

    def clear_selection(self) -> None:
        self.state.clear_selection()

    def get_text_range(self, start: int, end: int) -> str:
        return self.document.slice(start, end)

    def view(self) -> BufferView:
        return BufferView(
            version=self.document.version,
            text=self.document.text,
            cursor=self.state.cursor,
            selection=self.state.selection,
        )

    def mirror(self, *, attributes: Optional[dict[str, str]] = None) -> BufferMirror:
        return BufferMirror(
            text=self.document.text,
            cursor=self.state.cursor,
            selection_start=self.state.selection_start,
            selection_end=self.state.selection_end,
            attributes=dict(attributes or {}),
        )

    # -------------------------------------------------------------- mutations

    def replace_range(
        self,
        start: int,
        end: int,
        text: str,
        *,
        label: str,
        cursor: Optional[int] = None,
    ) -> None:
        """Replace ``[start, end)`` with ``text``.

        The cursor lands on ``cursor`` when given, otherwise just after the
        inserted text.
        """

        length = len(self.document)
        start = clamp_offset(start, length)
        end = clamp_offset(end, length)
        if start > end:
            start, end = end, start
        self._before_mutation(label)
        self.document = self.document.replace(start, end, text)
        target = start + len(text) if cursor is None else cursor
        self.set_cursor(target)

    def insert_text(
        self, text: str, *, at: Optional[int] = None, label: str = "insert_text"
    ) -> None:
        position = self.state.cursor if at is None else at
        self.replace_range(position, position, text, label=label)

    def delete_range(self, start: int, end: int, *, label: str = "delete_range") -> None:
        self.replace_range(start, end, "", label=label, cursor=min(start, end))

    def set_text(self, text: str, *, label: str = "set_text", cursor: int = 0) -> None:
        """Replace the whole document, snapshotting first."""

        self._before_mutation(label)
        self.document = self.document.with_text(text)
        self.set_cursor(cursor)

    # ------------------------------------------------------------ undo/redo

    def push_snapshot(self, label: str) -> None:
        """Record the current state on the undo stack (clears redo)."""

        self.undo_history.push(
            UndoEntry(text=self.document.text, cursor=self.state.cursor, label=label)
        )

    def _before_mutation(self, label: str) -> None:
        group = self._group
        if group is None:
            self.push_snapshot(label)
        elif not group.snapshotted:
            self.push_snapshot(group.label)
            group.snapshotted = True

    def open_group(self, label: str, *, eager: bool = False) -> bool:
        """Start an undo group; ``False`` if one is already open.

        An eager group snapshots immediately even if nothing is mutated
        (insert-mode entry); a lazy group snapshots on its first mutation.
        """

        if self._group is not None:
            return False
        self._group = _UndoGroup(label=label)
        if eager:
            self.push_snapshot(label)
            self._group.snapshotted = True
        return True

    def close_group(self) -> None:
        self._group = None

    def transaction(self, label: str) -> "Transaction":
        return Transaction(self, label)

    def undo(self) -> bool:
        entry = self.undo_history.undo(self._current_entry("undo"))
        if entry is None:
            return False
        self._restore(entry)
        telemetry.record_event(
            "buffer.undo",
            level="debug",
            data={"buffer": self.name, "label": entry.label},
            logger_name=self.logger_name,
        )
        return True

    def redo(self) -> bool:
        entry = self.undo_history.redo(self._current_entry("redo"))
        if entry is None:
            return False
        self._restore(entry)
        telemetry.record_event(
            "buffer.redo",
            level="debug",
            data={"buffer": self.name, "label": entry.label},
            logger_name=self.logger_name,
        )
        return True

    def _current_entry(self, label: str) -> UndoEntry:
        return UndoEntry(text=self.document.text, cursor=self.state.cursor, label=label)

    def _restore(self, entry: UndoEntry) -> None:
        self._group = None
        self.document = self.document.with_text(entry.text)
        self.set_cursor(entry.cursor)


class Transaction(AbstractContextManager["Transaction"]):
    """Lazy undo group wrapped in a telemetry span.

    Nested transactions (or a transaction inside an already open group) join
    the outer group instead of snapshotting again.
    """

    def __init__(self, buffer: Buffer, label: str) -> None:
        self.buffer = buffer
        self.label = label
        self._span_cm: Optional[ContextManager[object]] = None
        self._owns_group = False

    def __enter__(self) -> "Transaction":
        self._span_cm = telemetry.span(
            name=f"buffer::{self.label}",
            logger_name=self.buffer.logger_name,
            component=True,
            metadata={"buffer": self.buffer.name},
        )
        self._span_cm.__enter__()
        self._owns_group = self.buffer.open_group(self.label)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self._owns_group:
            self.buffer.close_group()
        if self._span_cm is not None:
            self._span_cm.__exit__(exc_type, exc, tb)
        return False


__all__ = ["Buffer", "BufferView", "Transaction"]
