"""Per-engine editor state shared by every mode and action."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from modal_engine.buffer import Buffer, MarkTable
from modal_engine.config import EngineConfig
from modal_engine.editing.operators import Operator
from modal_engine.editing.types import FindSpec, SearchSpec
from modal_engine.history import LastCommand, MacroRecorder, RepeatTracker

if TYPE_CHECKING:
    from modal_engine.keymaps.resolver import ResolutionMatch


@dataclass(slots=True)
class PendingState:
    """Partially typed Normal/Visual command.

    ``count`` accumulates digits as typed. ``operator`` is set between an
    operator key and its motion, with ``operator_count`` holding the count
    typed before it. ``keys`` holds a prefix of a multi-key binding (``g``,
    ``i`` after an operator) and ``awaiting`` an action still waiting for
    its character argument (``f``, ``r``, ``m``, ``"``...).
    """

    count: str = ""
    register: Optional[str] = None
    operator: Optional[Operator] = None
    operator_count: int = 1
    operator_has_count: bool = False
    keys: List[str] = field(default_factory=list)
    awaiting: Optional["ResolutionMatch"] = None

    @property
    def active(self) -> bool:
        return bool(
            self.count
            or self.register is not None
            or self.operator is not None
            or self.keys
            or self.awaiting is not None
        )

    def take_count(self) -> tuple[int, bool]:
        typed = int(self.count) if self.count else 1
        has_count = bool(self.count)
        if self.operator is not None:
            return self.operator_count * typed, has_count or self.operator_has_count
        return typed, has_count

    def reset(self) -> None:
        self.count = ""
        self.register = None
        self.operator = None
        self.operator_count = 1
        self.operator_has_count = False
        self.keys.clear()
        self.awaiting = None


@dataclass(slots=True)
class VisualState:
    anchor: int = 0
    linewise: bool = False
    active: bool = False


@dataclass(slots=True)
class CommandLineState:
    prefix: str = ":"
    text: str = ""
    history: List[str] = field(default_factory=list)
    history_index: Optional[int] = None

    def reset(self, prefix: str = ":") -> None:
        self.prefix = prefix
        self.text = ""
        self.history_index = None


@dataclass(slots=True)
class EditorState:
    """Everything the key dispatcher mutates besides the buffer and registers."""

    config: EngineConfig = field(default_factory=EngineConfig)
    marks: MarkTable = field(default_factory=MarkTable)
    macros: MacroRecorder = field(default_factory=MacroRecorder)
    repeat: RepeatTracker = field(default_factory=RepeatTracker)
    pending: PendingState = field(default_factory=PendingState)
    visual: VisualState = field(default_factory=VisualState)
    command_line: CommandLineState = field(default_factory=CommandLineState)
    last_find: Optional[FindSpec] = None
    search: Optional[SearchSpec] = None
    status: str = ""

    @classmethod
    def from_config(cls, config: EngineConfig) -> "EditorState":
        return cls(
            config=config,
            macros=MacroRecorder(
                depth_limit=config.macro_depth_limit, logger_name=config.logger_name
            ),
        )

    def begin_insert(
        self, buffer: Buffer, base: LastCommand, *, repeat_with_newline: bool = False
    ) -> None:
        """Open the Insert undo group and start capturing typed text.

        The group is opened before any positioning edit (``o``, ``c``) so the
        whole command plus the typing undoes as one step.
        """

        buffer.open_group("insert", eager=True)
        self.repeat.begin_insert(base, repeat_with_newline=repeat_with_newline)

    def insert_typed(self, buffer: Buffer, text: str) -> None:
        """Insert ``text`` at the cursor and add it to the Insert record."""

        buffer.insert_text(text, label="insert")
        session = self.repeat.session
        if session is not None:
            session.type(text)


__all__ = [
    "CommandLineState",
    "EditorState",
    "PendingState",
    "VisualState",
]
