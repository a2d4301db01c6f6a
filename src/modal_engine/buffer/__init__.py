"""Buffer abstractions, registers, marks and undo/redo data structures."""

from .buffer import Buffer, BufferView, Transaction
from .document import BufferDocument, clamp_offset
from .marks import MarkTable
from .registers import (
    ClipboardProvider,
    MemoryClipboard,
    RegisterBank,
    RegisterValue,
    SystemClipboard,
)
from .state import BufferState
from .sync import BufferMirror
from .undo import UndoEntry, UndoHistory

__all__ = [
    "BufferDocument",
    "BufferState",
    "ClipboardProvider",
    "MemoryClipboard",
    "SystemClipboard",
    "RegisterBank",
    "RegisterValue",
    "MarkTable",
    "UndoHistory",
    "UndoEntry",
    "Buffer",
    "BufferView",
    "Transaction",
    "BufferMirror",
    "clamp_offset",
]
