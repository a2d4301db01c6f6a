"""Insert mode: typed text goes into the buffer at the cursor."""

from __future__ import annotations

from typing import Optional

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import is_text_input, update_flag
from .keymap_mode import KeymapMode


class InsertMode(KeymapMode):
    name = "insert"
    keymap = "insert"

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        self.pending.reset()
        # no-op when the entering command already opened the group
        self.context.buffer.open_group("insert", eager=True)
        update_flag(self.context, "insert_active", True)

    def on_exit(self, next_mode: Optional[str]) -> None:
        del next_mode
        self.context.buffer.close_group()
        self.context.state.repeat.session = None
        update_flag(self.context, "insert_active", False)

    def handle_miss(self, key: KeyInput, token: str) -> ModeResult:
        if not is_text_input(key):
            return ModeResult(consumed=False, status="miss")
        self.context.state.insert_typed(self.context.buffer, key.text or "")
        return ModeResult(consumed=True, status="insert")


__all__ = ["InsertMode"]
