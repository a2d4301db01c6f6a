"""Visual modes: the selection runs from the anchor to the cursor."""

from __future__ import annotations

from typing import Optional

from .keymap_helpers import update_flag
from .keymap_mode import KeymapMode
from .selection import VISUAL_MODES, sync_selection


class VisualMode(KeymapMode):
    name = "visual"
    keymap = "visual"
    counts = True
    linewise = False

    def on_enter(self, previous: Optional[str]) -> None:
        state = self.context.state
        self.pending.reset()
        if previous not in VISUAL_MODES:
            state.visual.anchor = self.context.buffer.cursor
        state.visual.linewise = self.linewise
        state.visual.active = True
        update_flag(self.context, "visual_active", True)
        sync_selection(self.context)

    def on_exit(self, next_mode: Optional[str]) -> None:
        self.pending.reset()
        if next_mode in VISUAL_MODES:
            return
        self.context.state.visual.active = False
        update_flag(self.context, "visual_active", False)
        self.context.buffer.clear_selection()


class VisualLineMode(VisualMode):
    name = "visual_line"
    linewise = True


__all__ = ["VisualMode", "VisualLineMode"]
