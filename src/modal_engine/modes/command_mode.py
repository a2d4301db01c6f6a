"""Command-line mode with inline editing and keymap integration."""

from __future__ import annotations

from typing import Optional

from .base_mode import KeyInput, ModeResult
from .keymap_helpers import is_text_input, update_flag
from .keymap_mode import KeymapMode


class CommandMode(KeymapMode):
    """Collects a ``:`` command or a ``/``/``?`` search pattern.

    The prefix is chosen by the command that opened the line; the text is
    kept in ``EditorState.command_line`` so hosts can render it.
    """

    name = "command"
    keymap = "command"

    def on_enter(self, previous: Optional[str]) -> None:
        del previous
        self.pending.reset()
        line = self.context.state.command_line
        line.text = ""
        line.history_index = None
        update_flag(self.context, "command_active", True)
        self.context.bus.emit("command.start", line.prefix)

    def on_exit(self, next_mode: Optional[str]) -> None:
        del next_mode
        line = self.context.state.command_line
        update_flag(self.context, "command_active", False)
        self.context.bus.emit("command.end", self.current_command)
        line.reset()

    @property
    def current_command(self) -> str:
        return self.context.state.command_line.text

    def handle_miss(self, key: KeyInput, token: str) -> ModeResult:
        if is_text_input(key):
            self.context.state.command_line.text += key.text or ""
            self.context.bus.emit("command.text", self.current_command)
            return ModeResult(consumed=True, status="editing")
        return ModeResult(consumed=False, status="miss", message=None)


__all__ = ["CommandMode"]
