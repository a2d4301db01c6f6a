"""Base classes and shared utilities for editor modes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from modal_engine.buffer import Buffer, RegisterBank
from modal_engine.editing.operators import OperatorEngine

from .editor_state import EditorState

if TYPE_CHECKING:
    from modal_engine.keymaps.resolver import ResolutionMatch


@dataclass(frozen=True, slots=True)
class KeyInput:
    """Normalized key event passed to modes."""

    key: str
    modifiers: Tuple[str, ...] = ()
    text: Optional[str] = None


@dataclass(slots=True)
class ModeResult:
    """Result returned from ``Mode.handle_key``.

    ``status`` is a machine-readable outcome (``"pending"`` keeps the
    pending command state alive); ``message`` is the user-visible status
    line text, if any.
    """

    consumed: bool
    switch_to: Optional[str] = None
    status: str = "ok"
    message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ActionRequest:
    """Everything an action handler needs about the key that triggered it."""

    match: "ResolutionMatch"
    count: int = 1
    has_count: bool = False
    argument: Optional[str] = None
    register: str = '"'
    key: Optional[KeyInput] = None

    @property
    def metadata(self):
        return self.match.action.metadata


@dataclass(slots=True)
class ModeContext:
    """Shared services every mode can access."""

    buffer: Buffer
    registers: RegisterBank
    bus: "ModeBus"
    extras: Dict[str, object] = field(default_factory=dict)
    state: EditorState = field(default_factory=EditorState)
    operators: OperatorEngine = field(init=False)

    def __post_init__(self) -> None:
        self.operators = OperatorEngine(
            self.buffer,
            self.registers,
            indent_width=self.state.config.indent_width,
            logger_name=self.state.config.logger_name,
        )


class ModeBus:
    """Minimal event bus letting modes exchange structured signals."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, list[Callable[[object], None]]] = {}

    def subscribe(self, event: str, callback: Callable[[object], None]) -> None:
        self._subscribers.setdefault(event, []).append(callback)

    def unsubscribe(self, event: str, callback: Callable[[object], None]) -> None:
        callbacks = self._subscribers.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def emit(self, event: str, payload: object | None = None) -> None:
        for callback in list(self._subscribers.get(event, [])):
            callback(payload)


class Mode:
    """Base class all concrete editor modes inherit from."""

    name: str = "mode"

    def __init__(self, context: ModeContext) -> None:
        self.context = context

    def on_enter(
        self, previous: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del previous

    def on_exit(
        self, next_mode: Optional[str]
    ) -> None:  # pragma: no cover - default no-op
        del next_mode

    def handle_key(
        self, key: KeyInput
    ) -> ModeResult:  # pragma: no cover - abstract override
        raise NotImplementedError
