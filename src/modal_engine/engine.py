"""Embeddable editor facade: one buffer, one mode manager, one key entry point."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from modal_engine.buffer import (
    Buffer,
    BufferDocument,
    BufferMirror,
    ClipboardProvider,
    MarkTable,
    MemoryClipboard,
    RegisterBank,
    SystemClipboard,
    UndoHistory,
)
from modal_engine.config import EngineConfig
from modal_engine.keymaps import KeymapRegistry
from modal_engine.modes import (
    CommandMode,
    EditorState,
    InsertMode,
    KeyInput,
    ModeBus,
    ModeContext,
    ModeResult,
    NormalMode,
    VisualLineMode,
    VisualMode,
)
from modal_engine.modes.keymap_helpers import parse_keys
from modal_engine.modes.mode_manager import ModeManager
from modal_engine.modes.selection import VISUAL_MODES
from modal_engine.runtime import telemetry


class EditorEngine:
    """Modal text editing engine bound to a single buffer.

    All input goes through :meth:`dispatch_key`; hosts render from
    :meth:`get_buffer_text`, :meth:`get_selection` and the ``status`` text,
    and listen for bus events (``mode.switch``, ``status``,
    ``command.write`` ...) through :meth:`subscribe`. Engines share no state
    with each other.
    """

    def __init__(
        self,
        text: str = "",
        *,
        config: Optional[EngineConfig] = None,
        clipboard: Optional[ClipboardProvider] = None,
        name: str = "default",
        keymap_registry: Optional[KeymapRegistry] = None,
    ) -> None:
        self.config = config or EngineConfig()
        logger_name = self.config.logger_name
        self.logger = telemetry.get_logger(f"{logger_name}.engine")
        if clipboard is None:
            clipboard = (
                SystemClipboard(logger_name=logger_name)
                if self.config.use_system_clipboard
                else MemoryClipboard()
            )
        self.buffer = Buffer(
            name=name,
            document=BufferDocument.from_text(text),
            undo=UndoHistory(self.config.undo_limit),
            logger_name=logger_name,
        )
        self.registers = RegisterBank(
            clipboard=clipboard,
            clipboard_registers=self.config.clipboard_registers,
            logger_name=logger_name,
        )
        self.bus = ModeBus()
        self.state = EditorState.from_config(self.config)
        self.context = ModeContext(
            buffer=self.buffer,
            registers=self.registers,
            bus=self.bus,
            state=self.state,
        )
        self.manager = ModeManager(self.context, keymap_registry=keymap_registry)
        for mode_cls in (NormalMode, InsertMode, VisualMode, VisualLineMode, CommandMode):
            self.manager.register_mode(mode_cls)

    # ------------------------------------------------------------------ input

    def dispatch_key(
        self,
        key: str,
        modifiers: Iterable[str] = (),
        text: Optional[str] = None,
    ) -> ModeResult:
        """Process one key event; single printable keys carry themselves as text."""

        if text is None and len(key) == 1:
            text = key
        return self.manager.handle_key(KeyInput(key=key, modifiers=tuple(modifiers), text=text))

    def feed(self, keys: str) -> List[ModeResult]:
        """Dispatch ``"d2w<Esc>"`` style notation key by key."""

        return [self.manager.handle_key(key) for key in parse_keys(keys)]

    # ------------------------------------------------------------------ reads

    @property
    def mode(self) -> str:
        return self.manager.mode_name or "normal"

    @property
    def cursor(self) -> int:
        return self.buffer.cursor

    @property
    def marks(self) -> MarkTable:
        return self.state.marks

    @property
    def status(self) -> str:
        return self.state.status

    @property
    def command_line(self) -> str:
        line = self.state.command_line
        return line.prefix + line.text if self.mode == "command" else ""

    def get_buffer_text(self) -> str:
        return self.buffer.text

    def get_selection(self) -> Tuple[int, int]:
        """``(selection_start, selection_end)``; equal offsets outside Visual."""

        state = self.buffer.state
        return state.selection_start, state.selection_end

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self.bus.subscribe(event, callback)

    def unsubscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self.bus.unsubscribe(event, callback)

    # -------------------------------------------------------------- mutations

    def insert_at_cursor(self, text: str) -> None:
        """Insert host-supplied text at the cursor as one undoable change."""

        if not text:
            return
        if self.mode == "insert":
            self.state.insert_typed(self.buffer, text)
            return
        with self.buffer.transaction("insert_at_cursor"):
            self.buffer.insert_text(text, label="insert_at_cursor")

    def replace_entire_buffer(self, text: str) -> None:
        """Swap in a new document (file open); marks are dropped, undo keeps the old text."""

        if self.mode in VISUAL_MODES or self.mode == "command":
            self.manager.switch_mode("normal")
        self.state.marks.clear()
        self.state.pending.reset()
        self.buffer.set_text(text, label="replace_buffer", cursor=0)
        self.bus.emit("buffer.replaced", len(text))

    async def paste_from_clipboard(self, *, before: bool = False) -> bool:
        """Read the clipboard provider and put its text like ``"*p``.

        When a second paste is issued before this read resolves, this one is
        discarded and returns ``False``.
        """

        value = await self.registers.fetch_clipboard()
        if value is None or not value.text:
            return False
        outcome = self.context.operators.put("*", before=before)
        return outcome.applied

    # ----------------------------------------------------------- host sync

    def pull_buffer(self) -> BufferMirror:
        return self.buffer.mirror(attributes={"mode": self.mode, "status": self.status})

    def push_host_edit(self, mirror: BufferMirror) -> None:
        if mirror.text != self.buffer.text:
            self.buffer.set_text(mirror.text, label="host_edit", cursor=mirror.cursor)
        else:
            self.buffer.set_cursor(mirror.cursor)
        if mirror.selection is not None:
            self.buffer.set_selection(mirror.selection_start, mirror.selection_end)


def create_engine(
    text: str = "",
    *,
    config: Optional[EngineConfig] = None,
    clipboard: Optional[ClipboardProvider] = None,
) -> EditorEngine:
    return EditorEngine(text, config=config, clipboard=clipboard)


__all__ = ["EditorEngine", "create_engine"]
