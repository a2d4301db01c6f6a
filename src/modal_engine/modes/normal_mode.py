"""Normal mode: counts, operators and single-key commands."""

from __future__ import annotations

from typing import Optional

from modal_engine.editing.motions import clamp_to_char

from .keymap_helpers import update_flag
from .keymap_mode import KeymapMode


class NormalMode(KeymapMode):
    name = "normal"
    keymap = "normal"
    counts = True

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        buffer = self.context.buffer
        self.pending.reset()
        buffer.set_cursor(clamp_to_char(buffer.document, buffer.cursor), keep_column=True)
        update_flag(self.context, "recording", self.context.state.macros.recording is not None)


__all__ = ["NormalMode"]
