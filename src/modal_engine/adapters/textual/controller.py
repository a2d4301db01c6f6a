"""Bridge between an :class:`EditorEngine` and a Textual view.

The adapter owns no widgets. After every key and every relayed bus event it
hands the host an immutable :class:`EngineSnapshot`; the host decides how
to draw it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from modal_engine.engine import EditorEngine
from modal_engine.modes import ModeResult
from modal_engine.runtime import telemetry

# bus events forwarded to ``on_event``; file and quit requests are host work
RELAYED_EVENTS = (
    "mode.switch",
    "visual.selection",
    "command.submit",
    "command.error",
    "command.write",
    "command.quit",
    "command.edit",
    "command.new",
    "buffer.replaced",
)

MODE_LABELS = {
    "insert": "-- INSERT --",
    "visual": "-- VISUAL --",
    "visual_line": "-- VISUAL LINE --",
}


@dataclass(frozen=True, slots=True)
class EngineSnapshot:
    text: str
    cursor: int
    selection: tuple[int, int]
    mode: str
    status: str
    command_line: str
    recording: Optional[str] = None

    @property
    def status_line(self) -> str:
        """Status message, else the mode banner, plus the recording marker."""

        line = self.status or MODE_LABELS.get(self.mode, "")
        if self.recording and not line.startswith("recording"):
            line = f"{line}  recording @{self.recording}".strip()
        return line

    @classmethod
    def capture(cls, engine: EditorEngine) -> "EngineSnapshot":
        return cls(
            text=engine.get_buffer_text(),
            cursor=engine.cursor,
            selection=engine.get_selection(),
            mode=engine.mode,
            status=engine.status,
            command_line=engine.command_line,
            recording=engine.state.macros.recording,
        )


def _ignore_event(name: str, payload: object | None) -> None:
    return None


@dataclass(slots=True)
class TextualUIHooks:
    render: Callable[[EngineSnapshot], None]
    on_event: Callable[[str, object | None], None] = _ignore_event


class TextualVimAdapter:
    """Feeds Textual key events to the engine and pushes snapshots back."""

    def __init__(self, engine: EditorEngine, hooks: TextualUIHooks) -> None:
        self.engine = engine
        self.hooks = hooks
        self._logger_name = f"{engine.config.logger_name}.textual"
        self._last: Optional[EngineSnapshot] = None
        for event in RELAYED_EVENTS:
            engine.subscribe(event, lambda payload, name=event: self._relay(name, payload))
        self.refresh()

    def handle_textual_key(
        self,
        key: str,
        *,
        text: Optional[str] = None,
        modifiers: Iterable[str] = (),
    ) -> ModeResult:
        mods = tuple(str(mod).lower() for mod in modifiers)
        result = self.engine.dispatch_key(key, mods, text)
        telemetry.record_event(
            "textual::key",
            level="debug",
            data={
                "key": "+".join((*mods, key)),
                "status": result.status,
                "mode": self.engine.mode,
                "cursor": self.engine.cursor,
            },
            logger_name=self._logger_name,
        )
        self.refresh()
        return result

    def refresh(self) -> EngineSnapshot:
        """Render when anything visible changed since the last render."""

        snapshot = EngineSnapshot.capture(self.engine)
        if snapshot != self._last:
            self._last = snapshot
            self.hooks.render(snapshot)
        return snapshot

    def _relay(self, name: str, payload: object | None) -> None:
        self.hooks.on_event(name, payload)
        self.refresh()


__all__ = ["EngineSnapshot", "TextualUIHooks", "TextualVimAdapter"]
